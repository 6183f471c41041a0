from typing import Any, Dict, Optional
from fastapi import status


class StorefrontError(Exception):
    """Base for business-rule failures that map onto a caller-facing rejection."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"
    default_message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_details(self) -> Dict[str, Any]:
        return {"message": self.message, **self.details}


class ValidationError(StorefrontError):
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class EmptyCartError(StorefrontError):
    code = "EMPTY_CART"
    default_message = "Cart is empty"


class StaleProductError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "STALE_PRODUCT"
    default_message = "One or more products in cart are no longer available"


class InsufficientStockError(StorefrontError):
    code = "INSUFFICIENT_STOCK"
    default_message = "Requested quantity not available"


class GatewayError(StorefrontError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "GATEWAY_ERROR"
    default_message = "Payment provider unavailable"

    def to_details(self) -> Dict[str, Any]:
        # provider responses stay in the logs
        return {"message": self.default_message}


class InvalidSignatureError(StorefrontError):
    code = "INVALID_SIGNATURE"
    default_message = "Invalid signature"

    def to_details(self) -> Dict[str, Any]:
        return {"message": self.default_message}


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"
    default_message = "Resource not found"


class InvalidStateError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATE"

    def __init__(self, current_status: str, message: Optional[str] = None):
        self.current_status = current_status
        super().__init__(message or f"Invalid transition from status: {current_status}",
                         current_status=current_status)


class ConflictError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"
    default_message = "Resource already exists"


class AuthError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_AUTH"
    default_message = "Not authorized to access this route"


class ForbiddenError(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"
    default_message = "User role is not authorized to access this route"


class DatabaseUnavailableError(StorefrontError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "DB_UNAVAILABLE"
    default_message = "Database connection error"
