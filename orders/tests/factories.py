from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from orders.models import Order, OrderItem


class OrderFactory(DjangoModelFactory):
    """Bare order row for read-side tests; use `place_order` when stock matters."""

    class Meta:
        model = Order

    number = factory.Sequence(lambda n: f"PED-T{n:05d}")
    status = Order.STATUS_PENDING
    subtotal = Decimal("84.75")
    tax = Decimal("15.25")
    total = Decimal("100.00")


class OrderItemFactory(DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory("catalog.tests.factories.ProductFactory")
    product_name = factory.LazyAttribute(lambda o: o.product.name if o.product else "")
    product_sku = factory.LazyAttribute(lambda o: o.product.sku if o.product else "")
    quantity = 1
    unit_price = Decimal("100.00")
    subtotal = factory.LazyAttribute(lambda o: o.unit_price * o.quantity)
