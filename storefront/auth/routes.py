from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.constants import logger
from storefront.auth.dependencies import register_validation
from storefront.auth.models import AccountDeleteIn, PasswordUpdateIn, RegisterIn, SignIn, UpdateDetailsIn
from storefront.auth.repository import get_user_profile, update_user_details
from storefront.auth.services import authenticate_user, change_password, delete_account, register_user
from storefront.common.errors import NotFoundError
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session

auth_router = APIRouter()


def serialize_user(user):
    return {
        "public_id": str(user.public_id),
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone_number": user.phone_number,
        "role": user.role,
        "created_at": user.created_at,
    }


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn = Depends(register_validation), session: AsyncSession = Depends(get_session)):

    logger.info("register.attempt", extra={"email": payload.email})
    access = await register_user(session, payload)
    return success_response({"access_token": access, "token_type": "bearer"}, status.HTTP_201_CREATED)


@auth_router.post("/login")
async def login(payload: SignIn, session: AsyncSession = Depends(get_session)):

    logger.info("login.attempt", extra={"email": payload.email})
    access = await authenticate_user(session, payload)
    logger.info("login.success", extra={"email": payload.email})
    return success_response({"access_token": access, "token_type": "bearer"})


@auth_router.get("/me")
async def get_me(request: Request, session: AsyncSession = Depends(get_session)):
    user = await get_user_profile(session, request.state.user_identifier)
    if user is None:
        raise NotFoundError("User not found")
    return success_response(serialize_user(user))


@auth_router.put("/me")
async def update_details(request: Request, payload: UpdateDetailsIn, session: AsyncSession = Depends(get_session)):
    user_identifier = request.state.user_identifier

    updates = payload.model_dump(exclude_unset=True)
    if updates:
        updated = await update_user_details(session, user_identifier, updates)
        if not updated:
            raise NotFoundError("User not found")
        await session.commit()

    user = await get_user_profile(session, user_identifier)
    return success_response(serialize_user(user))


@auth_router.put("/password")
async def update_password(request: Request, payload: PasswordUpdateIn, session: AsyncSession = Depends(get_session)):
    access = await change_password(session, request.state.user_identifier, payload)
    return success_response({"access_token": access, "token_type": "bearer"})


@auth_router.delete("/me")
async def delete_me(request: Request, payload: AccountDeleteIn, session: AsyncSession = Depends(get_session)):
    await delete_account(session, request.state.user_identifier, payload)
    return success_response({"message": "User account successfully deleted"})
