"""Inventory services: the single choke point for product stock mutations.

Every change to `Product.stock` goes through `adjust_stock`, which applies
the delta as one conditional UPDATE so concurrent callers can never both
pass a stale sufficiency check.
"""

import logging

from catalog.models import Product
from common import errors
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import StockMovement

logger = logging.getLogger("backoffice.inventory")


def _movement_type_for(delta: int) -> str:
    return StockMovement.TYPE_INBOUND if delta > 0 else StockMovement.TYPE_OUTBOUND


@transaction.atomic
def adjust_stock(
    *,
    product_id: int,
    delta: int,
    reason: str = "",
    reference: str = "",
    movement_type: str | None = None,
) -> int:
    """Add `delta` (signed) to a product's stock and return the new balance.

    Decrements only apply when the current stock covers them; otherwise
    `InsufficientStockError` is raised and nothing changes. Joins the
    caller's transaction when there is one.
    """
    if isinstance(delta, bool) or not isinstance(delta, int) or delta == 0:
        raise errors.ValidationError("Stock delta must be a non-zero integer.")

    qs = Product.objects.filter(pk=product_id)
    if delta < 0:
        qs = qs.filter(stock__gte=-delta)
    updated = qs.update(stock=F("stock") + delta, updated_at=timezone.now())

    if not updated:
        current = Product.objects.filter(pk=product_id).values_list("stock", flat=True).first()
        if current is None:
            raise errors.NotFoundError(f"Product {product_id} not found.")
        raise errors.InsufficientStockError(product_id=product_id, requested=-delta, available=current)

    # The row stays locked by our UPDATE until commit, so this is our own balance
    balance = Product.objects.filter(pk=product_id).values_list("stock", flat=True).get()
    StockMovement.objects.create(
        product_id=product_id,
        movement_type=movement_type or _movement_type_for(delta),
        quantity=delta,
        balance_after=balance,
        reason=reason,
        reference=reference,
    )
    logger.info(
        "stock_adjusted",
        extra={
            "event": "stock_adjusted",
            "product_id": product_id,
            "delta": delta,
            "balance_after": balance,
            "reference": reference,
        },
    )
    return balance


def record_opening_stock(*, product_id: int, quantity: int) -> int:
    """Book the initial on-hand quantity of a newly created product."""

    return adjust_stock(
        product_id=product_id,
        delta=quantity,
        reason="opening stock",
        reference=f"product:{product_id}",
        movement_type=StockMovement.TYPE_INBOUND,
    )
