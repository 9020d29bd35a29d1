"""Domain exceptions shared by the marketplace service.

Services raise these instead of ``HTTPException`` so the same business logic
can be called from routers, scripts and tests. ``libs.common.error_handler``
maps them to JSON responses.
"""

from typing import Any, Optional


class MarketplaceError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500
    code: str = "MARKETPLACE_ERROR"

    def __init__(self, message: str, *, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(MarketplaceError):
    """Malformed or missing input. Raised before any write."""

    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(MarketplaceError):
    status_code = 401
    code = "AUTHENTICATION_FAILED"


class PermissionDeniedError(MarketplaceError):
    status_code = 403
    code = "PERMISSION_DENIED"


class NotFoundError(MarketplaceError):
    status_code = 404
    code = "NOT_FOUND"


class ProductNotFoundError(NotFoundError):
    """A checkout line references a product that cannot be resolved."""

    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: Any):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ConflictError(MarketplaceError):
    """Duplicate of a unique value, e.g. registering an existing email."""

    status_code = 409
    code = "CONFLICT"


class PersistenceError(MarketplaceError):
    status_code = 500
    code = "PERSISTENCE_ERROR"


class UpstreamNotificationError(MarketplaceError):
    """Email/WhatsApp delivery failure. Logged by the dispatcher, never returned."""

    status_code = 502
    code = "NOTIFICATION_FAILED"

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(f"{channel}: {message}")
