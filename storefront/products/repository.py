from sqlalchemy import func, select, update
from storefront.common.utils import now, parse_public_id
from storefront.products.constants import logger
from storefront.schema.full_schema import Product


def serialize_product(product):
    return {
        "id": str(product.public_id),
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "category": product.category,
        "images": list(product.images or []),
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


async def get_live_product(session, product_pid, include_deleted=False):
    product_pid = parse_public_id(product_pid)
    if product_pid is None:
        return None
    stmt = select(Product).where(Product.public_id == product_pid)
    if not include_deleted:
        stmt = stmt.where(Product.deleted_at.is_(None))
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def find_product(session, product_pid, include_deleted=False):
    """Catalog lookup: {id, name, price, image, stock} for a live product, None when absent or deleted."""
    product = await get_live_product(session, product_pid, include_deleted)
    if product is None:
        logger.debug("product.not_found", extra={"product_public_id": str(product_pid)})
        return None
    return {
        "id": product.id,
        "public_id": product.public_id,
        "name": product.name,
        "price": product.price,
        "image": product.images[0] if product.images else "",
        "stock": product.stock,
    }


async def fetch_prods(session, page, limit):
    offset = (page - 1) * limit
    stmt = (
        select(Product)
        .where(Product.deleted_at.is_(None))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset(offset)
        .limit(limit)
    )
    res = await session.execute(stmt)
    rows = res.scalars().all()

    total = (await session.execute(
        select(func.count(Product.id)).where(Product.deleted_at.is_(None)))).scalar_one()
    return rows, total


async def insert_product(session, payload):
    product = Product(**payload.model_dump(mode="python"))
    product.category = payload.category.value
    session.add(product)
    await session.flush()
    return product


async def patch_product(session, product_id, updates):
    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.deleted_at.is_(None))
        .values(**updates, updated_at=now())
        .returning(Product.id)
    )
    res = await session.execute(stmt)
    # a concurrent delete between the lookup and this update leaves nothing to patch
    return res.scalar_one_or_none()


async def soft_delete_product(session, product_id):
    stmt = (
        update(Product)
        .where(Product.id == product_id, Product.deleted_at.is_(None))
        .values(deleted_at=now(), updated_at=now())
        .returning(Product.id)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()
