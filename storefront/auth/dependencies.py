from email_validator import EmailNotValidError, validate_email
from fastapi import HTTPException, Request, status
from fastapi.security import HTTPBearer
from storefront.auth.constants import logger
from storefront.auth.models import RegisterIn
from storefront.auth.utils import decode_token, validate_password
from storefront.common.errors import ForbiddenError, ValidationError
from storefront.schema.full_schema import UserRoleName


def normalize_email_address(email: str) -> str:
    """
    Validate and return normalized email (lowercased, normalized by email-validator).
    Raises ValueError if invalid.
    """
    try:
        v = validate_email(email, check_deliverability=False)
        return v.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(str(e))


async def register_validation(payload: RegisterIn) -> RegisterIn:
    try:
        email = normalize_email_address(payload.email)
    except ValueError as e:
        logger.warning("register.validation.email_invalid", extra={"reason": str(e)})
        raise ValidationError(f"Invalid email: {e}")

    is_valid, detail = validate_password(payload.password)
    if not is_valid:
        logger.warning("register.validation.password_invalid", extra={"email": email, "reason": detail})
        raise ValidationError(detail)

    return payload.model_copy(update={"email": email})


class Authentication(HTTPBearer):
    def __init__(self, auto_error=True):
        super().__init__(auto_error=auto_error)

    async def __call__(self, request: Request) -> dict:
        auth_creds = await super().__call__(request)
        decoded_token = decode_token(auth_creds.credentials)

        if not decoded_token or not decoded_token.get("sub"):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token provided.")

        return decoded_token


async def require_admin(request: Request) -> bool:
    if getattr(request.state, "user_role", None) != UserRoleName.ADMIN.value:
        logger.warning("auth.admin_required", extra={
            "user_public_id": getattr(request.state, "user_public_id", None),
            "path": request.url.path,
        })
        raise ForbiddenError()
    return True
