import logging

logger = logging.getLogger("auth")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured auth event with action, user, ip, path and status."""
    meta = getattr(request, "META", {}) or {}
    payload = {
        "action": action,
        "ip": meta.get("REMOTE_ADDR"),
        "path": getattr(request, "path", None),
        "status": status,
    }
    if user is not None:
        payload["user_id"] = getattr(user, "id", None)
        payload["username"] = getattr(user, "username", None)
        payload["role"] = getattr(user, "role", None)
    if extra:
        payload.update(extra)
    logger.info(payload)
