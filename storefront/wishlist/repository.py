from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from storefront.common.utils import now
from storefront.schema.full_schema import Product, Wishlist, WishlistItem
from storefront.wishlist.constants import Presence


async def get_wishlist_id(session, user_id):
    res = await session.execute(select(Wishlist.id).where(Wishlist.user_id == user_id))
    return res.scalar_one_or_none()


async def get_or_create_wishlist(session, user_id):
    wishlist_id = await get_wishlist_id(session, user_id)
    if wishlist_id:
        return wishlist_id

    wishlist = Wishlist(user_id=user_id)
    session.add(wishlist)
    try:
        await session.commit()
        return wishlist.id
    except IntegrityError:
        await session.rollback()
        return await get_wishlist_id(session, user_id)


async def fetch_wishlist_products(session, wishlist_id):
    stmt = (
        select(Product.public_id, Product.name, Product.price, Product.images, Product.stock)
        .join(WishlistItem, WishlistItem.product_id == Product.id)
        .where(WishlistItem.wishlist_id == wishlist_id, Product.deleted_at.is_(None))
        .order_by(WishlistItem.id)
    )
    rows = (await session.execute(stmt)).all()
    return [
        {
            "product_id": str(r.public_id),
            "name": r.name,
            "price": r.price,
            "image": r.images[0] if r.images else "",
            "in_stock": r.stock > 0,
        }
        for r in rows
    ]


async def toggle_wishlist_item(session, wishlist_id, product_id) -> Presence:
    """Removes the product when it is already wishlisted, adds it otherwise."""
    stmt = select(WishlistItem.id).where(
        WishlistItem.wishlist_id == wishlist_id, WishlistItem.product_id == product_id)
    existing_id = (await session.execute(stmt)).scalar_one_or_none()

    if existing_id is not None:
        await session.execute(delete(WishlistItem).where(WishlistItem.id == existing_id))
        return Presence.REMOVED

    await session.execute(insert(WishlistItem).values(
        wishlist_id=wishlist_id, product_id=product_id, created_at=now()))
    return Presence.ADDED


async def remove_wishlist_item(session, wishlist_id, product_id):
    res = await session.execute(delete(WishlistItem).where(
        WishlistItem.wishlist_id == wishlist_id, WishlistItem.product_id == product_id))
    return res.rowcount
