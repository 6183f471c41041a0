from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.dependencies import require_admin
from storefront.common.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from storefront.common.errors import NotFoundError
from storefront.common.utils import page_meta, success_response
from storefront.db.dependencies import get_session
from storefront.products.constants import logger
from storefront.products.models import ProductCreateIn, ProductUpdateIn
from storefront.products.repository import (fetch_prods, get_live_product, insert_product,
                                            patch_product, serialize_product, soft_delete_product)

prods_public_router = APIRouter()
prods_admin_router = APIRouter(dependencies=[Depends(require_admin)])


@prods_public_router.get("")
async def get_products(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    session: AsyncSession = Depends(get_session)):

    rows, total = await fetch_prods(session, page, limit)
    items_out = [serialize_product(p) for p in rows]

    return success_response({"products": items_out, **page_meta(total, page, limit, len(items_out))})


@prods_public_router.get("/{product_public_id}")
async def get_product_details(product_public_id: str, session: AsyncSession = Depends(get_session)):
    product = await get_live_product(session, product_public_id)
    if product is None:
        raise NotFoundError("Product not found")
    return success_response(serialize_product(product))


@prods_admin_router.post("")
async def create_product(request: Request, payload: ProductCreateIn, session: AsyncSession = Depends(get_session)):
    user_pid = request.state.user_public_id
    logger.info("product.create.attempt", extra={"user_public_id": user_pid})

    product = await insert_product(session, payload)
    await session.commit()

    logger.info("product.create.success", extra={"product_public_id": str(product.public_id), "user_public_id": user_pid})
    return success_response(serialize_product(product), status_code=status.HTTP_201_CREATED)


@prods_admin_router.patch("/{product_public_id}")
async def update_product(request: Request, product_public_id: str, payload: ProductUpdateIn,
                         session: AsyncSession = Depends(get_session)):

    product = await get_live_product(session, product_public_id)
    if product is None:
        raise NotFoundError("Product not found")

    updates = payload.model_dump(exclude_unset=True)  # only the fields the caller sent
    if "category" in updates and updates["category"] is not None:
        updates["category"] = updates["category"].value
    if updates:
        patched = await patch_product(session, product.id, updates)
        if patched is None:
            raise NotFoundError("Product not found")
        await session.commit()
        await session.refresh(product)

    logger.info("product.update.success", extra={
        "product_public_id": str(product.public_id),
        "user_public_id": request.state.user_public_id,
        "fields": sorted(updates),
    })
    return success_response(serialize_product(product))


@prods_admin_router.delete("/{product_public_id}")
async def delete_product(request: Request, product_public_id: str, session: AsyncSession = Depends(get_session)):
    product = await get_live_product(session, product_public_id)
    if product is None:
        raise NotFoundError("Product not found")

    await soft_delete_product(session, product.id)
    await session.commit()

    logger.info("product.delete.success", extra={
        "product_public_id": str(product.public_id),
        "user_public_id": request.state.user_public_id,
    })
    return success_response({"message": "product deleted", "id": str(product.public_id)})
