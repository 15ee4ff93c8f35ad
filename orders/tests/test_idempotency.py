from datetime import timedelta
from unittest import mock

import pytest
from catalog.tests.factories import ProductFactory
from common import errors
from django.core.management import call_command
from django.utils import timezone
from orders.models import IdempotencyKey, Order
from orders.services import compute_request_hash, place_order, with_idempotency


@pytest.mark.django_db
def test_replayed_placement_creates_one_order(client_as, receptionist):
    product = ProductFactory(stock=10)
    api = client_as(receptionist)
    payload = {"items": [{"product_id": product.id, "quantity": 2}]}

    r1 = api.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="place-1")
    r2 = api.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="place-1")

    assert r1.status_code == r2.status_code == 201
    assert r1.json()["id"] == r2.json()["id"]
    assert Order.objects.count() == 1
    product.refresh_from_db()
    assert product.stock == 8


@pytest.mark.django_db
def test_key_reuse_with_different_payload_is_409(client_as, receptionist):
    product = ProductFactory(stock=10)
    api = client_as(receptionist)

    api.post(
        "/api/v1/orders/",
        {"items": [{"product_id": product.id, "quantity": 1}]},
        format="json",
        HTTP_IDEMPOTENCY_KEY="place-2",
    )
    r = api.post(
        "/api/v1/orders/",
        {"items": [{"product_id": product.id, "quantity": 5}]},
        format="json",
        HTTP_IDEMPOTENCY_KEY="place-2",
    )

    assert r.status_code == 409
    product.refresh_from_db()
    assert product.stock == 9


@pytest.mark.django_db
def test_replayed_cancel_returns_original_response(client_as, receptionist):
    product = ProductFactory(stock=5)
    order = place_order(items=[{"product_id": product.id, "quantity": 2}])
    api = client_as(receptionist)

    r1 = api.patch(f"/api/v1/orders/{order.id}/cancel/", HTTP_IDEMPOTENCY_KEY="cancel-1")
    r2 = api.patch(f"/api/v1/orders/{order.id}/cancel/", HTTP_IDEMPOTENCY_KEY="cancel-1")

    assert r1.status_code == r2.status_code == 200
    assert r1.json() == r2.json()
    product.refresh_from_db()
    assert product.stock == 5


@pytest.mark.django_db
def test_cancel_by_query_id_does_not_replay_another_orders_response(client_as, receptionist):
    product = ProductFactory(stock=10)
    first = place_order(items=[{"product_id": product.id, "quantity": 1}])
    second = place_order(items=[{"product_id": product.id, "quantity": 2}])
    api = client_as(receptionist)

    r1 = api.patch(f"/api/v1/orders/cancel/?id={first.id}", HTTP_IDEMPOTENCY_KEY="cancel-q")
    r2 = api.patch(f"/api/v1/orders/cancel/?id={second.id}", HTTP_IDEMPOTENCY_KEY="cancel-q")

    assert r1.status_code == 200
    assert r1.json()["order"]["id"] == first.id
    # Same key, different order: rejected rather than reported as cancelled
    assert r2.status_code == 409
    second.refresh_from_db()
    assert second.status == Order.STATUS_PENDING
    product.refresh_from_db()
    assert product.stock == 8

    r3 = api.patch(f"/api/v1/orders/cancel/?id={second.id}", HTTP_IDEMPOTENCY_KEY="cancel-q2")
    assert r3.status_code == 200
    second.refresh_from_db()
    assert second.status == Order.STATUS_CANCELLED
    product.refresh_from_db()
    assert product.stock == 10


@pytest.mark.django_db
def test_replayed_cancel_by_query_id_returns_original_response(client_as, receptionist):
    product = ProductFactory(stock=5)
    order = place_order(items=[{"product_id": product.id, "quantity": 2}])
    api = client_as(receptionist)

    r1 = api.patch(f"/api/v1/orders/cancel/?id={order.id}", HTTP_IDEMPOTENCY_KEY="cancel-q3")
    r2 = api.patch(f"/api/v1/orders/cancel/?id={order.id}", HTTP_IDEMPOTENCY_KEY="cancel-q3")

    assert r1.status_code == r2.status_code == 200
    assert r1.json() == r2.json()
    product.refresh_from_db()
    assert product.stock == 5


@pytest.mark.django_db
def test_business_rejections_are_stored(client_as, receptionist):
    product = ProductFactory(stock=1)
    api = client_as(receptionist)
    payload = {"items": [{"product_id": product.id, "quantity": 3}]}

    r1 = api.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="place-3")
    assert r1.status_code == 409
    key = IdempotencyKey.objects.get(key="place-3")
    assert key.response_code == 409
    assert key.expires_at > timezone.now()


@pytest.mark.django_db
def test_server_errors_release_the_key(client_as, receptionist):
    product = ProductFactory(stock=5)
    api = client_as(receptionist)
    payload = {"items": [{"product_id": product.id, "quantity": 1}]}

    with mock.patch("orders.views.place_order", side_effect=errors.StorageError("db down")):
        r1 = api.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="place-4")
    assert r1.status_code == 500
    assert not IdempotencyKey.objects.filter(key="place-4").exists()

    r2 = api.post("/api/v1/orders/", payload, format="json", HTTP_IDEMPOTENCY_KEY="place-4")
    assert r2.status_code == 201
    product.refresh_from_db()
    assert product.stock == 4


@pytest.mark.django_db
def test_in_progress_key_is_409():
    IdempotencyKey.objects.create(key="busy", scope="anon", path="/p", method="POST")

    body, code = with_idempotency(key="busy", user=None, path="/p", method="post", handler=lambda: ({}, 200))

    assert code == 409
    assert body == {"detail": "Request in progress"}


@pytest.mark.django_db
def test_handler_exception_releases_key():
    def boom():
        raise RuntimeError("unexpected")

    with pytest.raises(RuntimeError):
        with_idempotency(key="k", user=None, path="/p", method="POST", handler=boom)
    assert not IdempotencyKey.objects.exists()


def test_request_hash_is_order_insensitive():
    assert compute_request_hash({"a": 1, "b": [1, 2]}) == compute_request_hash({"b": [1, 2], "a": 1})
    assert compute_request_hash({}) is None
    assert compute_request_hash(None) is None


@pytest.mark.django_db
def test_cleanup_idempotency_command(capsys):
    now = timezone.now()
    for key, offset in (("old", -1), ("new", 1)):
        IdempotencyKey.objects.create(
            key=key, scope="anon", path="/p", method="POST", expires_at=now + timedelta(hours=offset)
        )

    call_command("cleanup_idempotency", "--dry-run")
    assert "1 expired" in capsys.readouterr().out
    assert IdempotencyKey.objects.count() == 2

    call_command("cleanup_idempotency")
    assert list(IdempotencyKey.objects.values_list("key", flat=True)) == ["new"]
