from __future__ import annotations

from dataclasses import dataclass

from .cart_validation import CartValidationError
from .exceptions import AccessDeniedError, ApiError, NotFoundError, PreconditionFailedError

PRODUCT_NOT_FOUND_MESSAGE = "Product is not registered in the catalog"
LOOKUP_FAILED_MESSAGE = "Product lookup failed"
QUANTITY_MESSAGE = "Quantity must be between 1 and 99"
NO_TRANSACTION_MESSAGE = "Transaction ID has not been obtained yet"
CAMERA_MESSAGE = "Cannot access the camera (HTTPS may be required)"
DETAIL_FAILED_MESSAGE = "Failed to register purchase detail"
TOTAL_FAILED_MESSAGE = "Failed to fetch transaction information"


@dataclass(frozen=True)
class UserFacingError:
    message: str
    details: str | None = None
    category: str = "unknown"

    @property
    def technical_details(self) -> str | None:
        if self.details:
            return self.details
        return None


def to_user_facing_error(exc: Exception, *, fallback: str = "Request failed") -> UserFacingError:
    if isinstance(exc, NotFoundError):
        return UserFacingError(message=PRODUCT_NOT_FOUND_MESSAGE, category="not_found")
    if isinstance(exc, ApiError):
        details = f"{exc.code} (HTTP {exc.status_code})"
        if exc.details:
            details = f"{details}: {exc.details}"
        return UserFacingError(message=fallback, details=details, category="transport")
    if isinstance(exc, CartValidationError):
        return UserFacingError(message=QUANTITY_MESSAGE, details=str(exc), category="validation")
    if isinstance(exc, PreconditionFailedError):
        return UserFacingError(message=NO_TRANSACTION_MESSAGE, details=str(exc), category="precondition")
    if isinstance(exc, AccessDeniedError):
        return UserFacingError(message=CAMERA_MESSAGE, details=str(exc), category="access_denied")
    return UserFacingError(message=fallback, details=str(exc) or None)
