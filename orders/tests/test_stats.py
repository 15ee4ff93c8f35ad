from datetime import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from orders.models import Order
from orders.selectors import MONTH_LABELS, order_stats
from orders.tests.factories import OrderFactory


def _at(year, month):
    return timezone.make_aware(datetime(year, month, 15, 12, 0))


@pytest.mark.django_db
def test_order_stats_excludes_cancelled_from_sales():
    march = OrderFactory(total=Decimal("100.00"))
    march_pending = OrderFactory(total=Decimal("50.00"))
    cancelled = OrderFactory(total=Decimal("999.00"), status=Order.STATUS_CANCELLED)
    last_year = OrderFactory(total=Decimal("70.00"), status="ENTREGADO")
    # created_at is auto_now_add; move rows to fixed dates
    Order.objects.filter(pk__in=[march.pk, march_pending.pk, cancelled.pk]).update(created_at=_at(2025, 3))
    Order.objects.filter(pk=last_year.pk).update(created_at=_at(2024, 11))

    stats = order_stats(year=2025)

    assert stats["year"] == 2025
    assert stats["summary"] == {"total_sales": Decimal("220.00"), "total_orders": 4, "pending": 2}
    assert [b["month"] for b in stats["monthly_sales"]] == MONTH_LABELS
    by_month = {b["month"]: b["amount"] for b in stats["monthly_sales"]}
    assert by_month["Mar"] == Decimal("150.00")
    assert by_month["Nov"] == Decimal("0.00")
    assert stats["status_counts"]["CANCELADO"] == 1
    assert stats["status_counts"]["ENTREGADO"] == 1
    assert stats["status_counts"]["PENDIENTE"] == 2
    assert stats["status_counts"]["CONFIRMADO"] == 0

    assert {b["month"]: b["amount"] for b in order_stats(year=2024)["monthly_sales"]}["Nov"] == Decimal("70.00")


@pytest.mark.django_db
def test_order_stats_on_empty_database():
    stats = order_stats()

    assert stats["year"] == timezone.now().year
    assert stats["summary"] == {"total_sales": Decimal("0.00"), "total_orders": 0, "pending": 0}
    assert all(b["amount"] == Decimal("0.00") for b in stats["monthly_sales"])
