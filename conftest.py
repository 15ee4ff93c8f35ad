import pytest
from common.choices import Role
from django.core.cache import cache
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _clear_cache():
    # Role lookups and throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_as(api_client):
    """Return an APIClient authenticated as the given user."""

    def _as(user):
        api_client.force_authenticate(user=user)
        return api_client

    return _as


@pytest.fixture
def administrator(db):
    return UserFactory(role=Role.ADMIN)


@pytest.fixture
def receptionist(db):
    return UserFactory(role=Role.RECEPTIONIST)


@pytest.fixture
def assistant(db):
    return UserFactory(role=Role.ASSISTANT)


@pytest.fixture
def cutter(db):
    return UserFactory(role=Role.CUTTER)
