from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory
from django.db import IntegrityError, transaction


@pytest.mark.django_db
def test_stock_cannot_go_negative_at_database_level():
    product = ProductFactory(stock=1)
    product.stock = -1
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            product.save(update_fields=["stock"])


@pytest.mark.django_db
def test_price_cannot_be_negative():
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ProductFactory(price=Decimal("-0.01"))


@pytest.mark.django_db
def test_sku_is_unique():
    ProductFactory(sku="DUP-1")
    with pytest.raises(IntegrityError):
        with transaction.atomic():
            ProductFactory(sku="DUP-1")


@pytest.mark.django_db
def test_low_stock_flag_uses_minimum_threshold():
    assert ProductFactory(stock=3, min_stock=3).is_low_stock is True
    assert ProductFactory(stock=4, min_stock=3).is_low_stock is False
