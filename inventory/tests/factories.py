from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from inventory.models import Material


class MaterialFactory(DjangoModelFactory):
    class Meta:
        model = Material

    name = factory.Sequence(lambda n: f"Tela {n}")
    kind = "tela"
    unit = Material.UNIT_CHOICES[0][0]
    current_stock = Decimal("25.000")
    min_stock = Decimal("5.000")
