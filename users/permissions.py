"""Role-based capability checks.

`ROLE_CAPABILITIES` is the only place that maps roles to what they may do.
Views declare the capability they need and `HasCapability` resolves the
caller's role through a TTL cache so repeated requests do not hit the
users table.
"""

import logging

from common.choices import Role, UserStatus
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.permissions import BasePermission

from .logging import log_auth_event

logger = logging.getLogger("auth")

ORDERS_VIEW = "orders.view"
ORDERS_CREATE = "orders.create"
ORDERS_CANCEL = "orders.cancel"
CATALOG_VIEW = "catalog.view"
CATALOG_MANAGE = "catalog.manage"
INVENTORY_VIEW = "inventory.view"
INVENTORY_MANAGE = "inventory.manage"
INVENTORY_ADJUST = "inventory.adjust"
CLIENTS_VIEW = "clients.view"
CLIENTS_MANAGE = "clients.manage"
REPORTS_VIEW = "reports.view"
USERS_MANAGE = "users.manage"

ALL_CAPABILITIES = frozenset(
    {
        ORDERS_VIEW,
        ORDERS_CREATE,
        ORDERS_CANCEL,
        CATALOG_VIEW,
        CATALOG_MANAGE,
        INVENTORY_VIEW,
        INVENTORY_MANAGE,
        INVENTORY_ADJUST,
        CLIENTS_VIEW,
        CLIENTS_MANAGE,
        REPORTS_VIEW,
        USERS_MANAGE,
    }
)

ROLE_CAPABILITIES = {
    Role.ADMIN: ALL_CAPABILITIES,
    Role.RECEPTIONIST: frozenset(
        {
            ORDERS_VIEW,
            ORDERS_CREATE,
            ORDERS_CANCEL,
            CATALOG_VIEW,
            INVENTORY_VIEW,
            CLIENTS_VIEW,
            CLIENTS_MANAGE,
            REPORTS_VIEW,
        }
    ),
    Role.DESIGNER: frozenset(
        {
            ORDERS_VIEW,
            CATALOG_VIEW,
            CATALOG_MANAGE,
            INVENTORY_VIEW,
            INVENTORY_MANAGE,
        }
    ),
    Role.CUTTER: frozenset({ORDERS_VIEW, CATALOG_VIEW, INVENTORY_VIEW, INVENTORY_MANAGE}),
    Role.ASSISTANT: frozenset({ORDERS_VIEW, CATALOG_VIEW, INVENTORY_VIEW}),
    Role.WORKSHOP_REP: frozenset({ORDERS_VIEW, INVENTORY_VIEW}),
}

_CACHE_PREFIX = "users:role:"


def _cache_key(user_id) -> str:
    return f"{_CACHE_PREFIX}{user_id}"


def get_cached_role(user_id: int) -> dict | None:
    """Return `{"role", "status", "is_superuser"}` for a user, cached with a TTL.

    Returns None for unknown users; misses are not cached.
    """
    key = _cache_key(user_id)
    data = cache.get(key)
    if data is not None:
        return data
    row = (
        get_user_model()
        .objects.filter(pk=user_id)
        .values("role", "status", "is_superuser", "is_active")
        .first()
    )
    if row is None:
        return None
    data = {
        "role": row["role"],
        "status": row["status"] if row["is_active"] else UserStatus.INACTIVE,
        "is_superuser": row["is_superuser"],
    }
    cache.set(key, data, timeout=getattr(settings, "ROLE_CACHE_TTL", 300))
    return data


def invalidate_role_cache(user_id: int) -> None:
    cache.delete(_cache_key(user_id))


def capabilities_for(user) -> frozenset:
    """Resolve the capability set of a user (empty for anonymous or inactive)."""
    if user is None or not getattr(user, "is_authenticated", False):
        return frozenset()
    data = get_cached_role(user.pk)
    if data is None or data["status"] != UserStatus.ACTIVE:
        return frozenset()
    if data["is_superuser"]:
        return ALL_CAPABILITIES
    return ROLE_CAPABILITIES.get(data["role"], frozenset())


def has_capability(user, capability: str) -> bool:
    return capability in capabilities_for(user)


class HasCapability(BasePermission):
    """Grant access when the caller holds the capability the view declares.

    Views set either `required_capability` (applies to every method) or
    `required_capabilities`, a dict keyed by HTTP method. Safe methods not
    listed fall back to the "GET" entry.
    """

    message = "You do not have permission to perform this action."

    def _required(self, request, view) -> str | None:
        per_method = getattr(view, "required_capabilities", None)
        if per_method:
            method = request.method.upper()
            if method in per_method:
                return per_method[method]
            if method in ("HEAD", "OPTIONS"):
                return per_method.get("GET")
            return per_method.get("*")
        return getattr(view, "required_capability", None)

    def has_permission(self, request, view) -> bool:
        capability = self._required(request, view)
        if capability is None:
            # Nothing declared: fail closed
            return False
        if has_capability(request.user, capability):
            return True
        if getattr(request.user, "is_authenticated", False):
            log_auth_event(
                "permission_denied",
                request,
                user=request.user,
                status="denied",
                extra={"capability": capability},
            )
        return False
