"""Read-side queries for orders: filtered listings, dashboard statistics and sales reports."""

from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from customer.models import Client
from django.db.models import Count, Q, Sum
from django.db.models.functions import ExtractMonth, TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .models import Order, OrderItem

MONTH_LABELS = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]
UNCATEGORISED = "Otros"


def orders_queryset(params=None):
    """Orders with client and items loaded, filtered by optional query params.

    Supported keys: `status`, `client`, `number`, `start` and `end` (ISO datetimes).
    """
    qs = Order.objects.select_related("client").prefetch_related("items").order_by("-id")
    if not params:
        return qs
    status = params.get("status")
    if status:
        qs = qs.filter(status=status)
    client = params.get("client")
    if client and str(client).isdigit():
        qs = qs.filter(client_id=int(client))
    number = params.get("number")
    if number:
        qs = qs.filter(number=number)
    start = parse_datetime(params.get("start") or "")
    if start:
        qs = qs.filter(created_at__gte=start)
    end = parse_datetime(params.get("end") or "")
    if end:
        qs = qs.filter(created_at__lte=end)
    return qs


def order_stats(year: int | None = None) -> dict:
    """Sales summary for the dashboard.

    Cancelled orders count towards `total_orders` and `status_counts` but
    never towards sales figures.
    """
    year = year or timezone.now().year
    not_cancelled = ~Q(status=Order.STATUS_CANCELLED)

    summary = Order.objects.aggregate(
        total_orders=Count("id"),
        pending=Count("id", filter=Q(status=Order.STATUS_PENDING)),
        total_sales=Sum("total", filter=not_cancelled),
    )

    monthly = dict(
        Order.objects.filter(not_cancelled, created_at__year=year)
        .annotate(month=ExtractMonth("created_at"))
        .values("month")
        .annotate(amount=Sum("total"))
        .values_list("month", "amount")
    )

    counts = dict(Order.objects.values("status").annotate(n=Count("id")).values_list("status", "n"))

    return {
        "year": year,
        "summary": {
            "total_sales": summary["total_sales"] or Decimal("0.00"),
            "total_orders": summary["total_orders"],
            "pending": summary["pending"],
        },
        "monthly_sales": [
            {"month": label, "amount": monthly.get(index, Decimal("0.00"))}
            for index, label in enumerate(MONTH_LABELS, start=1)
        ],
        "status_counts": {value: counts.get(value, 0) for value, _ in Order.STATUS_CHOICES},
    }


def _growth_percent(current: Decimal, previous: Decimal) -> int:
    if previous > 0:
        return int(((current - previous) * 100 / previous).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return 100 if current > 0 else 0


def sales_report(days: int = 30) -> dict:
    """Sales for the last `days` days compared with the `days` before them.

    Cancelled orders are left out of every figure. `daily_sales` only lists
    days with sales; `sales_by_category` counts units, with uncategorised or
    deleted products grouped under "Otros".
    """
    now = timezone.now()
    current_start = now - timedelta(days=days)
    previous_start = current_start - timedelta(days=days)
    sold = Order.objects.exclude(status=Order.STATUS_CANCELLED)

    totals = sold.aggregate(
        current=Sum("total", filter=Q(created_at__gte=current_start)),
        previous=Sum("total", filter=Q(created_at__gte=previous_start, created_at__lt=current_start)),
        orders=Count("id", filter=Q(created_at__gte=current_start)),
    )
    current = totals["current"] or Decimal("0.00")
    previous = totals["previous"] or Decimal("0.00")

    daily = (
        sold.filter(created_at__gte=current_start)
        .annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(amount=Sum("total"))
        .order_by("day")
    )

    by_category = (
        OrderItem.objects.filter(order__created_at__gte=current_start)
        .exclude(order__status=Order.STATUS_CANCELLED)
        .values("product__category__name")
        .annotate(units=Sum("quantity"))
        .order_by()
    )
    units: dict[str, int] = {}
    for row in by_category:
        name = row["product__category__name"] or UNCATEGORISED
        units[name] = units.get(name, 0) + row["units"]

    return {
        "days": days,
        "metrics": {
            "total_sales": current,
            "orders": totals["orders"],
            "new_clients": Client.objects.filter(created_at__gte=current_start).count(),
            "growth_percent": _growth_percent(current, previous),
            "previous_total": previous,
        },
        "daily_sales": [{"date": row["day"], "amount": row["amount"]} for row in daily],
        "sales_by_category": [
            {"category": name, "units": n} for name, n in sorted(units.items(), key=lambda kv: (-kv[1], kv[0]))
        ],
    }
