from datetime import timedelta
from decimal import Decimal

import pytest
from catalog.tests.factories import CategoryFactory, ProductFactory
from customer.models import Client
from customer.tests.factories import ClientFactory
from django.utils import timezone
from orders.models import Order
from orders.selectors import sales_report
from orders.tests.factories import OrderFactory, OrderItemFactory


def _days_ago(n):
    return timezone.now() - timedelta(days=n)


@pytest.mark.django_db
def test_sales_report_compares_with_previous_window():
    polos = ProductFactory(category=CategoryFactory(name="Polos"))
    casacas = ProductFactory(category=CategoryFactory(name="Casacas"))

    recent = OrderFactory(total=Decimal("120.00"))
    OrderItemFactory(order=recent, product=polos, quantity=3)
    recent_mixed = OrderFactory(total=Decimal("30.00"))
    OrderItemFactory(order=recent_mixed, product=polos, quantity=1)
    OrderItemFactory(order=recent_mixed, product=None, quantity=2)
    cancelled = OrderFactory(total=Decimal("999.00"), status=Order.STATUS_CANCELLED)
    OrderItemFactory(order=cancelled, product=polos, quantity=50)
    previous = OrderFactory(total=Decimal("100.00"))
    OrderItemFactory(order=previous, product=casacas, quantity=7)
    older = OrderFactory(total=Decimal("500.00"))

    Order.objects.filter(pk__in=[recent.pk, recent_mixed.pk, cancelled.pk]).update(created_at=_days_ago(2))
    Order.objects.filter(pk=previous.pk).update(created_at=_days_ago(45))
    Order.objects.filter(pk=older.pk).update(created_at=_days_ago(90))

    ClientFactory()
    old_client = ClientFactory()
    Client.objects.filter(pk=old_client.pk).update(created_at=_days_ago(40))

    report = sales_report(days=30)

    assert report["days"] == 30
    assert report["metrics"] == {
        "total_sales": Decimal("150.00"),
        "orders": 2,
        "new_clients": 1,
        "growth_percent": 50,
        "previous_total": Decimal("100.00"),
    }
    assert len(report["daily_sales"]) == 1
    assert report["daily_sales"][0]["amount"] == Decimal("150.00")
    assert report["sales_by_category"] == [
        {"category": "Polos", "units": 4},
        {"category": "Otros", "units": 2},
    ]


@pytest.mark.django_db
def test_sales_report_growth_without_previous_sales():
    OrderFactory(total=Decimal("80.00"))

    assert sales_report(days=7)["metrics"]["growth_percent"] == 100


@pytest.mark.django_db
def test_sales_report_on_empty_database():
    report = sales_report()

    assert report["days"] == 30
    assert report["metrics"]["total_sales"] == Decimal("0.00")
    assert report["metrics"]["growth_percent"] == 0
    assert report["daily_sales"] == []
    assert report["sales_by_category"] == []


@pytest.mark.django_db
def test_reports_endpoint(client_as, receptionist):
    OrderItemFactory(order=OrderFactory(total=Decimal("45.50")), quantity=2)

    r = client_as(receptionist).get("/api/v1/orders/reports/", {"days": 7})

    assert r.status_code == 200
    body = r.json()
    assert body["days"] == 7
    assert Decimal(body["metrics"]["total_sales"]) == Decimal("45.50")
    assert body["metrics"]["orders"] == 1
    assert body["daily_sales"][0]["date"] == timezone.localdate().isoformat()
    assert body["sales_by_category"][0]["units"] == 2


@pytest.mark.django_db
@pytest.mark.parametrize("days", ["0", "abc", "-5", "400"])
def test_reports_endpoint_rejects_bad_window(client_as, receptionist, days):
    r = client_as(receptionist).get("/api/v1/orders/reports/", {"days": days})
    assert r.status_code == 400


@pytest.mark.django_db
def test_reports_endpoint_requires_reports_capability(client_as, assistant):
    r = client_as(assistant).get("/api/v1/orders/reports/")
    assert r.status_code == 403
