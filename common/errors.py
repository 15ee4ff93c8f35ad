"""Service-layer error taxonomy shared by inventory and orders.

Services raise these; views translate them into `{"detail": ...}` responses
using `status_code` and `as_payload()`.
"""


class ServiceError(Exception):
    """Base class for failures surfaced by service functions."""

    status_code = 500
    default_detail = "Unable to complete the operation."

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def as_payload(self) -> dict:
        return {"detail": self.detail}


class ValidationError(ServiceError):
    """Malformed input, rejected before any mutation is attempted."""

    status_code = 400
    default_detail = "Invalid request."


class NotFoundError(ServiceError):
    status_code = 404
    default_detail = "Not found."


class ConflictError(ServiceError):
    """The requested transition is not allowed from the current state."""

    status_code = 409
    default_detail = "Conflict with the current state."


class InsufficientStockError(ServiceError):
    """A decrement would leave the product with negative stock."""

    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int | None = None):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"Insufficient stock for product {product_id}: requested {requested}, available {available}")

    def as_payload(self) -> dict:
        return {
            "detail": self.detail,
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class StorageError(ServiceError):
    """The persistence layer failed; the operation was rolled back."""

    status_code = 500
    default_detail = "Storage failure."
