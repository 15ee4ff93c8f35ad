from unittest import mock

import pytest
from django.db import DatabaseError


@pytest.mark.django_db
def test_health_is_public_and_checks_database(api_client):
    r = api_client.get("/health/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "ok"}


@pytest.mark.django_db
def test_health_reports_database_outage(api_client):
    with mock.patch("config.health.connection.cursor", side_effect=DatabaseError("down")):
        r = api_client.get("/health/")
    assert r.status_code == 503
    assert r.json()["database"] == "unavailable"
