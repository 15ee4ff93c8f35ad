from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory
from django.core.management import call_command
from django.core.management.base import CommandError
from inventory.models import Material, StockMovement
from inventory.services import adjust_stock
from inventory.tests.factories import MaterialFactory


@pytest.mark.django_db
def test_adjust_endpoint_applies_delta_and_records_adjust_movement(client_as, administrator):
    product = ProductFactory(stock=4)
    api = client_as(administrator)

    r = api.post(f"/api/v1/inventory/products/{product.id}/adjust/", {"delta": 6, "reason": "Recount"}, format="json")

    assert r.status_code == 200
    assert r.json() == {"product_id": product.id, "stock": 10}
    movement = StockMovement.objects.get(product=product)
    assert movement.movement_type == StockMovement.TYPE_ADJUST
    assert movement.reference == f"manual:user:{administrator.id}"


@pytest.mark.django_db
def test_adjust_endpoint_reports_insufficient_stock(client_as, administrator):
    product = ProductFactory(stock=2)
    api = client_as(administrator)

    r = api.post(f"/api/v1/inventory/products/{product.id}/adjust/", {"delta": -3, "reason": "Damaged"}, format="json")

    assert r.status_code == 409
    body = r.json()
    assert body["product_id"] == product.id
    assert body["available"] == 2
    product.refresh_from_db()
    assert product.stock == 2


@pytest.mark.django_db
def test_adjust_endpoint_validation_and_missing_product(client_as, administrator):
    api = client_as(administrator)
    product = ProductFactory(stock=2)

    r_zero = api.post(f"/api/v1/inventory/products/{product.id}/adjust/", {"delta": 0, "reason": "x"}, format="json")
    assert r_zero.status_code == 400

    r_missing = api.post("/api/v1/inventory/products/999999/adjust/", {"delta": 1, "reason": "x"}, format="json")
    assert r_missing.status_code == 404


@pytest.mark.django_db
def test_adjust_endpoint_requires_adjust_capability(client_as, cutter):
    product = ProductFactory(stock=2)

    r = client_as(cutter).post(
        f"/api/v1/inventory/products/{product.id}/adjust/", {"delta": 1, "reason": "x"}, format="json"
    )

    assert r.status_code == 403
    product.refresh_from_db()
    assert product.stock == 2


@pytest.mark.django_db
def test_movements_list_filters_by_product_and_reference(client_as, assistant):
    p1 = ProductFactory(stock=5)
    p2 = ProductFactory(stock=5)
    adjust_stock(product_id=p1.id, delta=-1, reference="order:1")
    adjust_stock(product_id=p1.id, delta=2, reference="manual")
    adjust_stock(product_id=p2.id, delta=-2, reference="order:2")
    api = client_as(assistant)

    r = api.get(f"/api/v1/inventory/movements/?product={p1.id}")
    assert r.status_code == 200
    assert {m["product"] for m in r.json()["results"]} == {p1.id}
    assert r.json()["count"] == 2

    r_ref = api.get("/api/v1/inventory/movements/?reference=order:2")
    assert [m["sku"] for m in r_ref.json()["results"]] == [p2.sku]


@pytest.mark.django_db
def test_low_stock_lists_products_at_or_below_minimum(client_as, assistant):
    low = ProductFactory(stock=2, min_stock=2)
    ProductFactory(stock=9, min_stock=2)
    ProductFactory(stock=0, min_stock=1, is_active=False)

    r = client_as(assistant).get("/api/v1/inventory/low-stock/")

    assert r.status_code == 200
    assert [p["id"] for p in r.json()["results"]] == [low.id]
    assert r.json()["results"][0]["is_low_stock"] is True


@pytest.mark.django_db
def test_materials_crud_and_low_stock_filter(client_as, cutter, assistant):
    MaterialFactory(name="Hilo", current_stock=Decimal("1.000"), min_stock=Decimal("2.000"))
    api = client_as(cutter)

    r_create = api.post(
        "/api/v1/inventory/materials/",
        {"name": "Botones", "kind": "avios", "unit": "unidad", "current_stock": "100", "min_stock": "20"},
        format="json",
    )
    assert r_create.status_code == 201
    material_id = r_create.json()["id"]

    r_patch = api.patch(f"/api/v1/inventory/materials/{material_id}/", {"current_stock": "10"}, format="json")
    assert r_patch.status_code == 200
    assert r_patch.json()["is_low_stock"] is True

    r_low = api.get("/api/v1/inventory/materials/?low_stock=true")
    assert {m["name"] for m in r_low.json()["results"]} == {"Hilo", "Botones"}

    r_negative = api.patch(f"/api/v1/inventory/materials/{material_id}/", {"current_stock": "-1"}, format="json")
    assert r_negative.status_code == 400

    r_denied = client_as(assistant).delete(f"/api/v1/inventory/materials/{material_id}/")
    assert r_denied.status_code == 403
    assert Material.objects.filter(pk=material_id).exists()


@pytest.mark.django_db
def test_check_stock_ledger_passes_when_in_sync(capsys):
    product = ProductFactory(stock=0)
    adjust_stock(product_id=product.id, delta=8)
    adjust_stock(product_id=product.id, delta=-3)

    call_command("check_stock_ledger", "--show-all")

    out = capsys.readouterr().out
    assert "in sync" in out
    assert "Stock ledger is consistent." in out


@pytest.mark.django_db
def test_check_stock_ledger_fails_on_drift(capsys):
    product = ProductFactory(stock=0)
    adjust_stock(product_id=product.id, delta=5)
    # Simulate a write that bypassed the stock primitive
    type(product).objects.filter(pk=product.pk).update(stock=7)

    with pytest.raises(CommandError):
        call_command("check_stock_ledger", "--product-id", str(product.id))

    assert "difference=+2" in capsys.readouterr().out
