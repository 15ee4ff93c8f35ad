"""Order services: placement and cancellation with consistent stock.

Placement and cancellation each run as one database transaction. Stock moves
only through `inventory.services.adjust_stock`, so a failure at any step
rolls back the order rows and every stock change made so far.
"""

import hashlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional, Tuple

from catalog.models import Product
from common import errors
from customer.models import Client
from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from inventory.services import adjust_stock

from .models import IdempotencyKey, Order, OrderItem

logger = logging.getLogger("backoffice.orders")

TWO_PLACES = Decimal("0.01")


@dataclass
class CancellationResult:
    """Outcome of a cancellation.

    `restored` lists `{"product_id", "quantity", "stock"}` per restored line;
    `skipped` lists lines whose product no longer exists.
    """

    order: Order
    previous_status: str
    restored: list = field(default_factory=list)
    skipped: list = field(default_factory=list)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def normalize_items(items) -> list[tuple[int, int]]:
    """Validate requested lines and return `(product_id, quantity)` pairs.

    Raises `ValidationError` before anything touches the database.
    """
    if not items or not isinstance(items, (list, tuple)):
        raise errors.ValidationError("At least one item is required.")
    lines = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise errors.ValidationError(f"Item {index} must be an object with product_id and quantity.")
        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not _is_int(product_id) or product_id <= 0:
            raise errors.ValidationError(f"Item {index} has an invalid product_id.")
        if not _is_int(quantity) or quantity <= 0:
            raise errors.ValidationError(f"Item {index} quantity must be a positive integer.")
        lines.append((product_id, quantity))
    return lines


def tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "TAX_RATE", "0.18")))


def split_tax(total: Decimal, rate: Optional[Decimal] = None) -> Tuple[Decimal, Decimal]:
    """Split a tax-inclusive total into `(net, tax)` with `net + tax == total`."""
    rate = tax_rate() if rate is None else rate
    net = (total / (Decimal("1") + rate)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return net, total - net


def _place(lines, client_id, payment_method, notes, user) -> Order:
    client = None
    if client_id is not None:
        client = Client.objects.filter(pk=client_id).first()
        if client is None:
            raise errors.NotFoundError(f"Client {client_id} not found.")

    # Lock in id order so concurrent placements sharing products cannot deadlock
    product_ids = sorted({product_id for product_id, _ in lines})
    products = {p.id: p for p in Product.objects.select_for_update().filter(id__in=product_ids).order_by("id")}
    missing = [pid for pid in product_ids if pid not in products]
    if missing:
        raise errors.NotFoundError(f"Product {missing[0]} not found.")
    inactive = [pid for pid in product_ids if not products[pid].is_active]
    if inactive:
        raise errors.ValidationError(f"Product {inactive[0]} is not available for sale.")

    priced = []
    total = Decimal("0.00")
    for product_id, quantity in lines:
        product = products[product_id]
        unit_price = product.price.quantize(TWO_PLACES)
        subtotal = (unit_price * quantity).quantize(TWO_PLACES)
        total += subtotal
        priced.append((product, quantity, unit_price, subtotal))
    net, tax = split_tax(total)

    order = Order.objects.create(
        client=client,
        status=Order.STATUS_PENDING,
        subtotal=net,
        tax=tax,
        total=total,
        payment_method=payment_method or "",
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    order.number = f"PED-{int(order.id):06d}"
    order.save(update_fields=["number"])

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                product=product,
                product_name=product.name,
                product_sku=product.sku,
                quantity=quantity,
                unit_price=unit_price,
                subtotal=subtotal,
            )
            for product, quantity, unit_price, subtotal in priced
        ]
    )
    for product, quantity, _, _ in priced:
        adjust_stock(
            product_id=product.id,
            delta=-quantity,
            reason="order placed",
            reference=f"order:{order.id}",
        )
    return order


def place_order(*, items, client_id=None, payment_method=None, notes="", user=None) -> Order:
    """Create an order with its line items and decrement stock per line.

    Prices come from the catalog, never from the caller. Raises
    `ValidationError`, `NotFoundError`, `InsufficientStockError` or
    `StorageError`; in every failure case nothing is persisted.
    """

    lines = normalize_items(items)
    try:
        with transaction.atomic():
            order = _place(lines, client_id, payment_method, notes, user)
    except DatabaseError as exc:
        logger.error(
            "order_placement_failed",
            extra={"event": "order_placement_failed", "client_id": client_id, "error": str(exc)},
        )
        raise errors.StorageError(str(exc)) from exc

    logger.info(
        "order_placed",
        extra={
            "event": "order_placed",
            "order_id": order.id,
            "number": order.number,
            "client_id": client_id,
            "user_id": getattr(user, "id", None),
            "total": str(order.total),
            "lines": len(lines),
        },
    )
    return order


def _cancel(order_id) -> CancellationResult:
    try:
        order = Order.objects.select_for_update().get(pk=order_id)
    except Order.DoesNotExist:
        raise errors.NotFoundError(f"Order {order_id} not found.")
    if order.status == Order.STATUS_CANCELLED:
        raise errors.ConflictError(f"Order {order.number or order.id} is already cancelled.")

    # Line items are the only record of what to give back; read them first
    items = list(order.items.order_by("product_id", "id"))

    result = CancellationResult(order=order, previous_status=order.status)
    order.status = Order.STATUS_CANCELLED
    order.save(update_fields=["status", "updated_at"])

    for item in items:
        skipped = {
            "item_id": item.id,
            "product_sku": item.product_sku,
            "quantity": int(item.quantity),
            "reason": "product no longer exists",
        }
        if item.product_id is None:
            result.skipped.append(skipped)
            continue
        try:
            balance = adjust_stock(
                product_id=item.product_id,
                delta=int(item.quantity),
                reason="order cancelled",
                reference=f"order:{order.id}",
            )
        except errors.NotFoundError:
            result.skipped.append(skipped)
            continue
        result.restored.append({"product_id": item.product_id, "quantity": int(item.quantity), "stock": balance})
    return result


def cancel_order(*, order_id, user=None) -> CancellationResult:
    """Cancel an order and give its quantities back to stock.

    The status change and every restoration commit together. Cancelling an
    already cancelled order raises `ConflictError` and restores nothing.
    Lines whose product was deleted are skipped and reported.
    """

    try:
        with transaction.atomic():
            result = _cancel(order_id)
    except DatabaseError as exc:
        logger.error(
            "order_cancellation_failed",
            extra={"event": "order_cancellation_failed", "order_id": order_id, "error": str(exc)},
        )
        raise errors.StorageError(str(exc)) from exc

    order = result.order
    for skipped in result.skipped:
        logger.warning(
            "stock_restore_skipped",
            extra={"event": "stock_restore_skipped", "order_id": order.id, **skipped},
        )
    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "user_id": getattr(user, "id", None),
            "status_from": result.previous_status,
            "status_to": order.status,
            "restored_lines": len(result.restored),
            "skipped_lines": len(result.skipped),
        },
    )
    return result


def _replay(record: IdempotencyKey, request_hash: Optional[str]) -> Tuple[dict, int]:
    if record.request_hash and request_hash and record.request_hash != request_hash:
        return {"detail": "Idempotency key reused with different request payload"}, 409
    if record.response_code is None or record.response_json is None:
        return {"detail": "Request in progress"}, 409
    return record.response_json, int(record.response_code)


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
) -> Tuple[dict, int]:
    """Apply a placement or cancellation at most once per client key.

    The key is claimed by inserting an `IdempotencyKey` row, unique per
    key, caller scope (`user:<id>` or `anon`), path and method. The caller
    that wins the insert runs `handler`; later callers get the stored
    outcome back, or 409 while the first call is still running or when the
    fingerprint (`request_hash`) no longer matches.

    Business rejections (4xx) are stored like successes: retrying them
    would fail the same way. A 5xx outcome or an exception raised by the
    handler means the transaction rolled back, so the claim is dropped and
    a retry runs again. Claims expire after `IDEMPOTENCY_TTL_HOURS`.
    """
    user_id = getattr(user, "id", None)
    lookup = {
        "key": key,
        "scope": f"user:{user_id}" if user_id else "anon",
        "path": str(path),
        "method": str(method).upper(),
    }
    expires_at = timezone.now() + timedelta(hours=getattr(settings, "IDEMPOTENCY_TTL_HOURS", 24))

    try:
        with transaction.atomic():
            claim = IdempotencyKey.objects.create(
                user=user if user_id else None,
                request_hash=request_hash,
                expires_at=expires_at,
                **lookup,
            )
    except IntegrityError:
        return _replay(IdempotencyKey.objects.get(**lookup), request_hash)

    try:
        body, code = handler()
    except Exception:
        IdempotencyKey.objects.filter(pk=claim.pk).delete()
        raise

    if code >= 500:
        IdempotencyKey.objects.filter(pk=claim.pk).delete()
    else:
        IdempotencyKey.objects.filter(pk=claim.pk).update(response_json=_json_safe(body), response_code=code)
    return body, code


def _json_safe(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Compute a canonical SHA256 hash of a request fingerprint (usually the body).

    Uses sorted keys JSON representation to stabilize the hash across equivalent payloads.
    Returns None when data is falsy or not JSON-serializable.
    """
    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
