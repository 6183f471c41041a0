from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.cart.constants import logger
from storefront.cart.models import CartItemInput, QuantityIn
from storefront.cart.repository import (clear_cart, find_cart_item, get_cart_id, get_cart_with_items,
                                        get_or_create_cart, recompute_cart_total, remove_item,
                                        set_item_quantity)
from storefront.common.errors import InsufficientStockError, NotFoundError
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.products.repository import find_product

carts_router = APIRouter()


def serialize_cart(cart):
    return {
        "id": cart["id"],
        "total_price": cart["total_price"],
        "updated_at": cart["updated_at"],
        "items": [
            {
                "product_id": str(i["product_public_id"]) if i["product_public_id"] else None,
                "name": i["name"],
                "price": i["price"],
                "image": i["image"],
                "quantity": i["quantity"],
                "available": not i["deleted"],
            }
            for i in cart["items"]
        ],
    }


async def _resolve_in_stock(session, product_pid, quantity):
    product = await find_product(session, product_pid)
    if product is None:
        raise NotFoundError("Product not found")
    if product["stock"] < quantity:
        raise InsufficientStockError(f"Only {product['stock']} items available in stock",
                                     available=product["stock"])
    return product


async def _owned_cart_id(session, user_id):
    cart_id = await get_cart_id(session, user_id)
    if not cart_id:
        raise NotFoundError("Cart not found")
    return cart_id


async def _current_cart(session, user_id):
    cart = await get_cart_with_items(session, user_id)
    return success_response(serialize_cart(cart))


@carts_router.get("")
async def get_cart(request: Request, session: AsyncSession = Depends(get_session)):
    cart = await get_cart_with_items(session, request.state.user_identifier)
    if cart is None:
        raise NotFoundError("Cart not found")
    return success_response(serialize_cart(cart))


@carts_router.post("")
async def add_to_cart(request: Request, payload: CartItemInput, session: AsyncSession = Depends(get_session)):
    user_id = request.state.user_identifier

    product = await _resolve_in_stock(session, payload.product_id, payload.quantity)
    cart_id = await get_or_create_cart(session, user_id)

    created = await set_item_quantity(session, cart_id, product["id"], payload.quantity)
    await recompute_cart_total(session, cart_id)
    await session.commit()

    logger.info("cart.item.set", extra={
        "user_public_id": request.state.user_public_id,
        "product_id": product["id"],
        "quantity": payload.quantity,
        "line_created": created,
    })
    return await _current_cart(session, user_id)


@carts_router.put("/{product_public_id}")
async def update_cart_item(request: Request, product_public_id: str, payload: QuantityIn,
                           session: AsyncSession = Depends(get_session)):
    user_id = request.state.user_identifier
    cart_id = await _owned_cart_id(session, user_id)

    product = await find_product(session, product_public_id)
    if product is None or await find_cart_item(session, cart_id, product["id"]) is None:
        raise NotFoundError("Item not found in cart")
    if product["stock"] < payload.quantity:
        raise InsufficientStockError(f"Only {product['stock']} items available in stock",
                                     available=product["stock"])

    await set_item_quantity(session, cart_id, product["id"], payload.quantity)
    await recompute_cart_total(session, cart_id)
    await session.commit()

    return await _current_cart(session, user_id)


@carts_router.delete("/{product_public_id}")
async def remove_cart_item(request: Request, product_public_id: str, session: AsyncSession = Depends(get_session)):
    user_id = request.state.user_identifier
    cart_id = await _owned_cart_id(session, user_id)

    # deleted products can still be removed from the cart
    product = await find_product(session, product_public_id, include_deleted=True)
    if product is not None:
        await remove_item(session, cart_id, product["id"])
    await recompute_cart_total(session, cart_id)
    await session.commit()

    return await _current_cart(session, user_id)


@carts_router.delete("")
async def empty_cart(request: Request, session: AsyncSession = Depends(get_session)):
    user_id = request.state.user_identifier
    cart_id = await _owned_cart_id(session, user_id)

    await clear_cart(session, cart_id)
    await session.commit()

    logger.info("cart.cleared", extra={"user_public_id": request.state.user_public_id, "cart_id": cart_id})
    return await _current_cart(session, user_id)
