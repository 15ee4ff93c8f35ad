import pytest
from common.choices import Role, UserStatus
from django.core.cache import cache
from rest_framework.test import APIRequestFactory
from rest_framework.views import APIView
from users import permissions
from users.permissions import (
    ALL_CAPABILITIES,
    CATALOG_MANAGE,
    INVENTORY_ADJUST,
    ORDERS_CANCEL,
    ORDERS_CREATE,
    ORDERS_VIEW,
    REPORTS_VIEW,
    ROLE_CAPABILITIES,
    HasCapability,
    capabilities_for,
    get_cached_role,
    has_capability,
)
from users.tests.factories import UserFactory


def test_every_role_has_a_capability_set():
    assert set(ROLE_CAPABILITIES) == set(Role.values)
    for caps in ROLE_CAPABILITIES.values():
        assert caps <= ALL_CAPABILITIES


@pytest.mark.django_db
@pytest.mark.parametrize(
    "role,capability,expected",
    [
        (Role.ADMIN, INVENTORY_ADJUST, True),
        (Role.RECEPTIONIST, ORDERS_CREATE, True),
        (Role.RECEPTIONIST, ORDERS_CANCEL, True),
        (Role.RECEPTIONIST, CATALOG_MANAGE, False),
        (Role.DESIGNER, CATALOG_MANAGE, True),
        (Role.DESIGNER, ORDERS_CREATE, False),
        (Role.ASSISTANT, ORDERS_VIEW, True),
        (Role.ASSISTANT, REPORTS_VIEW, False),
        (Role.WORKSHOP_REP, ORDERS_CANCEL, False),
    ],
)
def test_role_capabilities(role, capability, expected):
    user = UserFactory(role=role)
    assert has_capability(user, capability) is expected


@pytest.mark.django_db
@pytest.mark.parametrize("status", [UserStatus.INACTIVE, UserStatus.SUSPENDED])
def test_non_active_accounts_hold_no_capabilities(status):
    user = UserFactory(role=Role.ADMIN, status=status)
    assert capabilities_for(user) == frozenset()


@pytest.mark.django_db
def test_deactivated_django_account_holds_no_capabilities():
    user = UserFactory(role=Role.ADMIN, is_active=False)
    assert capabilities_for(user) == frozenset()


@pytest.mark.django_db
def test_superuser_holds_everything_regardless_of_role():
    user = UserFactory(role=Role.WORKSHOP_REP, is_superuser=True)
    assert capabilities_for(user) == ALL_CAPABILITIES


@pytest.mark.django_db
def test_role_is_cached_and_invalidated_on_save(django_assert_num_queries):
    user = UserFactory(role=Role.ASSISTANT)
    cache.clear()

    with django_assert_num_queries(1):
        assert get_cached_role(user.id)["role"] == Role.ASSISTANT
    with django_assert_num_queries(0):
        assert get_cached_role(user.id)["role"] == Role.ASSISTANT

    user.role = Role.RECEPTIONIST
    user.save()
    assert has_capability(user, ORDERS_CREATE) is True


@pytest.mark.django_db
def test_unknown_user_is_not_cached():
    assert get_cached_role(987654) is None
    assert cache.get(permissions._cache_key(987654)) is None


class _NothingDeclared(APIView):
    permission_classes = [HasCapability]


class _PerMethod(APIView):
    permission_classes = [HasCapability]
    required_capabilities = {"GET": ORDERS_VIEW, "*": CATALOG_MANAGE}


@pytest.mark.django_db
def test_view_without_declared_capability_fails_closed():
    request = APIRequestFactory().get("/")
    request.user = UserFactory(role=Role.ADMIN)
    assert HasCapability().has_permission(request, _NothingDeclared()) is False


@pytest.mark.django_db
def test_per_method_lookup_falls_back_to_get_and_star():
    perm = HasCapability()
    factory = APIRequestFactory()
    view = _PerMethod()

    assert perm._required(factory.get("/"), view) == ORDERS_VIEW
    assert perm._required(factory.head("/"), view) == ORDERS_VIEW
    assert perm._required(factory.options("/"), view) == ORDERS_VIEW
    assert perm._required(factory.delete("/"), view) == CATALOG_MANAGE


@pytest.mark.django_db
def test_denial_is_logged(caplog):
    request = APIRequestFactory().post("/api/v1/catalog/products/")
    request.user = UserFactory(role=Role.ASSISTANT)

    with caplog.at_level("INFO", logger="auth"):
        assert HasCapability().has_permission(request, _PerMethod()) is False

    denied = [r.msg for r in caplog.records if isinstance(r.msg, dict) and r.msg.get("action") == "permission_denied"]
    assert denied
    assert denied[0]["capability"] == CATALOG_MANAGE
    assert denied[0]["status"] == "denied"
