from decimal import Decimal
from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from storefront.cart.constants import logger
from storefront.common.utils import now
from storefront.schema.full_schema import Cart, CartItem, Product


async def get_cart_id(session, user_id):
    res = await session.execute(select(Cart.id).where(Cart.user_id == user_id))
    return res.scalar_one_or_none()


async def get_or_create_cart(session, user_id):
    cart_id = await get_cart_id(session, user_id)
    if cart_id:
        return cart_id

    cart = Cart(user_id=user_id)
    session.add(cart)
    try:
        await session.commit()
        return cart.id
    except IntegrityError:
        # a concurrent request created it first
        await session.rollback()
        return await get_cart_id(session, user_id)


async def get_cart_with_items(session, user_id):
    """
    Cart of an account with every line resolved against the catalog, or None when the account has no cart.
    Lines pointing at soft deleted products are kept and flagged so callers can decide what to do with them.
    """
    stmt = select(Cart).where(Cart.user_id == user_id).execution_options(populate_existing=True)
    res = await session.execute(stmt)
    cart = res.scalar_one_or_none()
    if cart is None:
        return None

    stmt = (
        select(CartItem.product_id, CartItem.quantity,
               Product.public_id, Product.name, Product.price, Product.images, Product.stock, Product.deleted_at)
        .join(Product, Product.id == CartItem.product_id, isouter=True)
        .where(CartItem.cart_id == cart.id)
        .order_by(CartItem.id)
    )
    rows = (await session.execute(stmt)).all()

    items = []
    for r in rows:
        items.append({
            "product_id": r.product_id,
            "product_public_id": r.public_id,
            "name": r.name,
            "price": r.price,
            "image": r.images[0] if r.images else "",
            "stock": r.stock,
            "quantity": r.quantity,
            "deleted": r.public_id is None or r.deleted_at is not None,
        })

    return {
        "id": cart.id,
        "user_id": cart.user_id,
        "total_price": cart.total_price,
        "updated_at": cart.updated_at,
        "items": items,
    }


async def find_cart_item(session, cart_id, product_id):
    stmt = select(CartItem.id, CartItem.quantity).where(
        CartItem.cart_id == cart_id, CartItem.product_id == product_id)
    return (await session.execute(stmt)).one_or_none()


async def set_item_quantity(session, cart_id, product_id, quantity):
    """Sets the line quantity, inserting the line when the product is not in the cart yet."""
    row = await find_cart_item(session, cart_id, product_id)
    if row:
        await session.execute(update(CartItem).where(CartItem.id == row.id).values(quantity=quantity))
        return False

    await session.execute(insert(CartItem).values(cart_id=cart_id, product_id=product_id,
                                                  quantity=quantity, created_at=now()))
    return True


async def remove_item(session, cart_id, product_id):
    res = await session.execute(
        delete(CartItem).where(CartItem.cart_id == cart_id, CartItem.product_id == product_id))
    return res.rowcount


async def recompute_cart_total(session, cart_id):
    stmt = (
        select(Product.price, CartItem.quantity)
        .join(Product, Product.id == CartItem.product_id)
        .where(CartItem.cart_id == cart_id, Product.deleted_at.is_(None))
    )
    rows = (await session.execute(stmt)).all()
    total = sum((Decimal(r.price) * r.quantity for r in rows), Decimal("0.00"))

    await session.execute(
        update(Cart).where(Cart.id == cart_id).values(total_price=total, updated_at=now()))
    return total


async def clear_cart(session, cart_id):
    """Empties a cart and zeroes its total. Safe to call for a cart that no longer exists."""
    await session.execute(delete(CartItem).where(CartItem.cart_id == cart_id))
    res = await session.execute(
        update(Cart).where(Cart.id == cart_id)
        .values(total_price=Decimal("0.00"), updated_at=now())
        .returning(Cart.id)
    )
    cleared = res.scalar_one_or_none() is not None
    if not cleared:
        logger.info("cart.clear.absent", extra={"cart_id": cart_id})
    return cleared
