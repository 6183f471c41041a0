from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from storefront.auth.constants import logger
from storefront.common.errors import ConflictError
from storefront.common.utils import now, parse_public_id
from storefront.schema.full_schema import Credential, Users


async def user_id_by_email(session, email):
    stmt = select(Users.id).where(Users.email == email, Users.deleted_at.is_(None))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def user_with_hash_by_email(session, email):
    stmt = (
        select(Users.id, Users.public_id, Users.role, Credential.password_hash)
        .join(Credential, Credential.user_id == Users.id)
        .where(Users.email == email, Users.deleted_at.is_(None))
    )
    res = await session.execute(stmt)
    return res.one_or_none()


async def identify_user_by_pid(session, user_pid):
    """Resolve the token subject to the account row the request acts as."""
    user_pid = parse_public_id(user_pid)
    if user_pid is None:
        return None
    stmt = select(Users.id, Users.public_id, Users.email, Users.role).where(
        Users.public_id == user_pid, Users.deleted_at.is_(None))
    res = await session.execute(stmt)
    row = res.one_or_none()
    if row is None:
        return None
    return {"id": row.id, "public_id": row.public_id, "email": row.email, "role": row.role}


async def insert_user_with_credential(session, email, role, password_hash):
    user = Users(email=email, role=role)
    session.add(user)
    try:
        await session.flush()
        session.add(Credential(user_id=user.id, password_hash=password_hash))
        await session.flush()
    except IntegrityError:
        await session.rollback()
        logger.warning("user.create.integrity_error", extra={"email": email})
        raise ConflictError("User already exists")
    return user


async def get_user_profile(session, user_id):
    stmt = select(Users).where(Users.id == user_id, Users.deleted_at.is_(None))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def update_user_details(session, user_id, updates):
    stmt = (
        update(Users)
        .where(Users.id == user_id, Users.deleted_at.is_(None))
        .values(**updates, updated_at=now())
        .returning(Users.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def password_hash_by_user_id(session, user_id):
    stmt = (
        select(Credential.password_hash)
        .join(Users, Users.id == Credential.user_id)
        .where(Credential.user_id == user_id, Users.deleted_at.is_(None))
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def update_password_hash(session, user_id, password_hash):
    stmt = (
        update(Credential)
        .where(Credential.user_id == user_id)
        .values(password_hash=password_hash, updated_at=now())
        .returning(Credential.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def soft_delete_user(session, user_id):
    """Marks the account deleted, frees its email for a new registration and drops the credential."""
    user = await get_user_profile(session, user_id)
    if user is None:
        return None

    stamp = now()
    stmt = (
        update(Users)
        .where(Users.id == user_id, Users.deleted_at.is_(None))
        .values(email=f"deleted:{user.public_id.hex}:{user.email}"[:320], deleted_at=stamp, updated_at=stamp)
        .returning(Users.id)
    )
    res = await session.execute(stmt)
    deleted = res.scalar_one_or_none()
    if deleted is not None:
        await session.execute(delete(Credential).where(Credential.user_id == user_id))
    return deleted
