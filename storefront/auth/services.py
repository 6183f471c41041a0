from storefront.auth.constants import logger
from storefront.auth.repository import (get_user_profile, insert_user_with_credential, password_hash_by_user_id,
                                        soft_delete_user, update_password_hash, user_id_by_email,
                                        user_with_hash_by_email)
from storefront.auth.utils import create_access_token, hash_password, validate_password, verify_password
from storefront.common.errors import AuthError, ConflictError, NotFoundError, ValidationError
from storefront.config.settings import config_settings
from storefront.schema.full_schema import UserRoleName


def resolve_role(admin_code):
    if admin_code and config_settings.ADMIN_CODE and admin_code == config_settings.ADMIN_CODE:
        return UserRoleName.ADMIN.value
    return UserRoleName.USER.value


async def register_user(session, payload):

    if await user_id_by_email(session, payload.email):
        logger.warning("user.duplicate", extra={"email": payload.email})
        raise ConflictError("User already exists")

    role = resolve_role(payload.admin_code)
    user = await insert_user_with_credential(session, payload.email, role, hash_password(payload.password))
    await session.commit()

    logger.info("user.created", extra={"user_public_id": str(user.public_id), "role": role})
    return create_access_token(user.public_id, role)


async def authenticate_user(session, payload):
    email = payload.email.strip().lower()
    row = await user_with_hash_by_email(session, email)

    if row is None or not verify_password(payload.password, row.password_hash):
        logger.warning("auth.user.invalid_credentials", extra={"email": email})
        raise AuthError("Invalid credentials")

    return create_access_token(row.public_id, row.role)


async def check_current_password(session, user_id, password, message):
    password_hash = await password_hash_by_user_id(session, user_id)
    if password_hash is None:
        raise NotFoundError("User not found")
    if not verify_password(password, password_hash):
        logger.warning("auth.password.mismatch", extra={"user_id": user_id})
        raise AuthError(message)


async def change_password(session, user_id, payload):
    await check_current_password(session, user_id, payload.current_password, "Current password is incorrect")

    is_valid, detail = validate_password(payload.new_password)
    if not is_valid:
        raise ValidationError(detail)

    await update_password_hash(session, user_id, hash_password(payload.new_password))
    await session.commit()

    user = await get_user_profile(session, user_id)
    logger.info("auth.password.updated", extra={"user_public_id": str(user.public_id)})
    return create_access_token(user.public_id, user.role)


async def delete_account(session, user_id, payload):
    await check_current_password(session, user_id, payload.password, "Password is incorrect")

    # checkout records stay behind for payment reconciliation
    if await soft_delete_user(session, user_id) is None:
        raise NotFoundError("User not found")
    await session.commit()
    logger.info("auth.account.deleted", extra={"user_id": user_id})
