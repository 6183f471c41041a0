from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.common.errors import NotFoundError
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.repository import find_product
from storefront.wishlist.constants import logger
from storefront.wishlist.models import WishlistToggleIn
from storefront.wishlist.repository import (fetch_wishlist_products, get_or_create_wishlist,
                                            get_wishlist_id, remove_wishlist_item, toggle_wishlist_item)

wishlist_router = APIRouter()


@wishlist_router.post("")
async def toggle_wishlist(request: Request, payload: WishlistToggleIn, session: AsyncSession = Depends(get_session)):
    product = await find_product(session, payload.product_id)
    if product is None:
        raise NotFoundError("Product not found")

    wishlist_id = await get_or_create_wishlist(session, request.state.user_identifier)
    presence = await toggle_wishlist_item(session, wishlist_id, product["id"])
    await session.commit()

    logger.info("wishlist.toggled", extra={
        "user_public_id": request.state.user_public_id,
        "product_id": product["id"],
        "presence": presence.value,
    })
    products = await fetch_wishlist_products(session, wishlist_id)
    return success_response({"presence": presence.value, "products": products})


@wishlist_router.get("")
async def get_wishlist(request: Request, session: AsyncSession = Depends(get_session)):
    wishlist_id = await get_or_create_wishlist(session, request.state.user_identifier)
    products = await fetch_wishlist_products(session, wishlist_id)
    return success_response({"products": products})


@wishlist_router.delete("/{product_public_id}")
async def remove_from_wishlist(request: Request, product_public_id: str, session: AsyncSession = Depends(get_session)):
    wishlist_id = await get_wishlist_id(session, request.state.user_identifier)
    if not wishlist_id:
        raise NotFoundError("Wishlist not found")

    product = await find_product(session, product_public_id, include_deleted=True)
    if product is not None:
        await remove_wishlist_item(session, wishlist_id, product["id"])
        await session.commit()

    products = await fetch_wishlist_products(session, wishlist_id)
    return success_response({"products": products})
