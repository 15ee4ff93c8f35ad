"""Read-side helpers for catalog views."""

from django.db.models import F, QuerySet

from .models import Product


def products_queryset() -> QuerySet:
    return Product.objects.select_related("category").order_by("-created_at", "-id")


def filter_low_stock(qs: QuerySet, low: bool = True) -> QuerySet:
    """Products at or below their reorder threshold (or above it when `low` is False)."""
    if low:
        return qs.filter(stock__lte=F("min_stock"))
    return qs.filter(stock__gt=F("min_stock"))
