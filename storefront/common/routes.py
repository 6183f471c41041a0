from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.errors import DatabaseUnavailableError
from storefront.common.logging_setup import get_logger
from storefront.db.dependencies import get_session

logger = get_logger("storefront.common")

home_router = APIRouter()


@home_router.get("/health")
async def health_check(session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(select(1))
    except SQLAlchemyError as e:
        logger.error("health.db_unreachable", extra={"error": str(e)})
        raise DatabaseUnavailableError()

    return {"status": "healthy"}
