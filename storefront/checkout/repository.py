from typing import Any, Dict, Optional
from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload
from storefront.common.utils import now, parse_public_id
from storefront.schema.full_schema import CheckoutItem, CheckoutRecord


async def create_checkout_record(session, *, user_id, cart_id, lines, total_price,
                                 payment_method, shipping_address, payment_reference) -> CheckoutRecord:
    record = CheckoutRecord(
        user_id=user_id,
        cart_id=cart_id,
        total_price=total_price,
        payment_method=payment_method,
        shipping_address=shipping_address,
        payment_reference=payment_reference,
        items=[CheckoutItem(**line) for line in lines],
    )
    session.add(record)
    await session.flush()
    return record


def _with_items():
    return select(CheckoutRecord).options(selectinload(CheckoutRecord.items)).execution_options(populate_existing=True)


async def find_by_reference(session, reference: str) -> Optional[CheckoutRecord]:
    res = await session.execute(_with_items().where(CheckoutRecord.payment_reference == reference))
    return res.scalar_one_or_none()


async def find_by_id(session, checkout_pid, user_id) -> Optional[CheckoutRecord]:
    """Record by public id, only when it belongs to the given account."""
    checkout_pid = parse_public_id(checkout_pid)
    if checkout_pid is None:
        return None
    stmt = _with_items().where(CheckoutRecord.public_id == checkout_pid, CheckoutRecord.user_id == user_id)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def reload_record(session, checkout_id: int) -> Optional[CheckoutRecord]:
    res = await session.execute(_with_items().where(CheckoutRecord.id == checkout_id))
    return res.scalar_one_or_none()


async def conditional_transition(session, checkout_id: int, expected_status: str, new_status: str,
                                 fields: Optional[Dict[str, Any]] = None) -> Optional[int]:
    """
    Moves a record to new_status only while it still is in expected_status.

    Returns the record id when this call performed the transition, None when the precondition no longer held
    (someone else already moved the record). Concurrent callers on the same row are serialized by the row lock,
    the one that waited re-checks the status predicate and updates nothing.
    """
    stmt = (
        update(CheckoutRecord)
        .where(CheckoutRecord.id == checkout_id, CheckoutRecord.status == expected_status)
        .values(status=new_status, updated_at=now(), **(fields or {}))
        .returning(CheckoutRecord.id)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def list_history(session, user_id, status: Optional[str], page: int, limit: int):
    filters = [CheckoutRecord.user_id == user_id]
    if status:
        filters.append(CheckoutRecord.status == status)

    stmt = (
        _with_items()
        .where(*filters)
        .order_by(CheckoutRecord.created_at.desc(), CheckoutRecord.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    rows = (await session.execute(stmt)).scalars().all()
    total = (await session.execute(select(func.count(CheckoutRecord.id)).where(*filters))).scalar_one()
    return rows, total
