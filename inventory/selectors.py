"""Selectors for the inventory domain."""

from catalog.models import Product
from catalog.selectors import filter_low_stock
from django.db.models import F, Sum

from .models import Material, StockMovement


def low_stock_products():
    return filter_low_stock(Product.objects.filter(is_active=True).select_related("category")).order_by(
        "stock", "name"
    )


def low_stock_materials():
    return Material.objects.filter(current_stock__lte=F("min_stock")).order_by("current_stock", "name")


def ledger_discrepancies(product_id: int | None = None, include_all: bool = False):
    """Compare each product's stock with the sum of its ledger movements.

    Returns a list of dicts with `product_id`, `sku`, `stock`, `ledger` and
    `difference`. Only mismatches are returned unless `include_all` is set.
    """
    products = Product.objects.all().order_by("id")
    if product_id is not None:
        products = products.filter(id=product_id)
    totals = dict(
        StockMovement.objects.filter(product__in=products)
        .values("product_id")
        .annotate(total=Sum("quantity"))
        .values_list("product_id", "total")
    )
    rows = []
    for product in products.only("id", "sku", "stock"):
        ledger = int(totals.get(product.id) or 0)
        difference = int(product.stock) - ledger
        if difference or include_all:
            rows.append(
                {
                    "product_id": product.id,
                    "sku": product.sku,
                    "stock": int(product.stock),
                    "ledger": ledger,
                    "difference": difference,
                }
            )
    return rows
