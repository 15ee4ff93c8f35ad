import pytest
from catalog.tests.factories import ProductFactory
from common.choices import Role
from customer.models import Client
from customer.tests.factories import ClientFactory
from orders.models import Order
from orders.services import place_order
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_receptionist_manages_clients(client_as, receptionist):
    api = client_as(receptionist)
    payload = {
        "tax_id": "20123456789",
        "business_name": "  Textiles Andinos SAC ",
        "email": "Compras@TextilesAndinos.pe",
        "phone": "+51987654321",
        "address": "Av. Gamarra 123, Lima",
    }

    r_create = api.post("/api/v1/customer/clients/", payload, format="json")
    assert r_create.status_code == 201
    client_id = r_create.json()["id"]
    created = Client.objects.get(pk=client_id)
    assert created.business_name == "Textiles Andinos SAC"
    assert created.email == "compras@textilesandinos.pe"

    r_update = api.patch(f"/api/v1/customer/clients/{client_id}/", {"address": "Jr. Huallaga 45"}, format="json")
    assert r_update.status_code == 200
    assert r_update.json()["address"] == "Jr. Huallaga 45"

    assert api.delete(f"/api/v1/customer/clients/{client_id}/").status_code == 204


@pytest.mark.django_db
@pytest.mark.parametrize("tax_id", ["1234567", "123456789", "2012345678A"])
def test_tax_id_must_be_dni_or_ruc(client_as, receptionist, tax_id):
    r = client_as(receptionist).post(
        "/api/v1/customer/clients/", {"tax_id": tax_id, "business_name": "Cliente"}, format="json"
    )
    assert r.status_code == 400
    assert "tax_id" in r.json()


@pytest.mark.django_db
def test_duplicate_tax_id_rejected(client_as, receptionist):
    ClientFactory(tax_id="12345678")
    r = client_as(receptionist).post(
        "/api/v1/customer/clients/", {"tax_id": "12345678", "business_name": "Otro"}, format="json"
    )
    assert r.status_code == 400


@pytest.mark.django_db
def test_list_search_and_order_count(client_as, receptionist):
    andinos = ClientFactory(business_name="Textiles Andinos SAC", tax_id="20123456789")
    ClientFactory(business_name="Confecciones Lima EIRL", tax_id="20987654321")
    product = ProductFactory(stock=5)
    place_order(items=[{"product_id": product.id, "quantity": 1}], client_id=andinos.id)
    api = client_as(receptionist)

    r_all = api.get("/api/v1/customer/clients/")
    assert [c["business_name"] for c in r_all.json()["results"]] == [
        "Confecciones Lima EIRL",
        "Textiles Andinos SAC",
    ]

    r_search = api.get("/api/v1/customer/clients/?search=20123456789")
    results = r_search.json()["results"]
    assert len(results) == 1
    assert results[0]["order_count"] == 1


@pytest.mark.django_db
def test_deleting_client_keeps_orders_as_direct_sales(client_as, administrator):
    client = ClientFactory()
    product = ProductFactory(stock=5)
    order = place_order(items=[{"product_id": product.id, "quantity": 1}], client_id=client.id)

    assert client_as(administrator).delete(f"/api/v1/customer/clients/{client.id}/").status_code == 204

    order = Order.objects.get(pk=order.pk)
    assert order.client_id is None


@pytest.mark.django_db
def test_designer_cannot_see_clients(client_as):
    designer = UserFactory(role=Role.DESIGNER)
    assert client_as(designer).get("/api/v1/customer/clients/").status_code == 403
