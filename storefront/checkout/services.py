from dataclasses import dataclass
from typing import Any, Dict, List
from storefront.cart.repository import clear_cart, get_cart_with_items
from storefront.checkout.constants import (GATEWAY_NAME, PAYMENT_FAILED, PAYMENT_SUCCESS, SUCCESS_EVENT,
                                           logger)
from storefront.checkout.gateway import GatewayVerification, PaymentIntent
from storefront.checkout.pricing import compute_snapshot_total, resolve_checkout_total, to_minor_units
from storefront.checkout.repository import (conditional_transition, create_checkout_record, find_by_id,
                                            find_by_reference, reload_record)
from storefront.checkout.state_machine import CANCELLED, COMPLETED, FAILED, PENDING, ensure_transition_allowed
from storefront.common.errors import EmptyCartError, InvalidStateError, NotFoundError, StaleProductError
from storefront.config.settings import config_settings
from storefront.schema.full_schema import CheckoutRecord


@dataclass
class ConfirmationOutcome:
    record: CheckoutRecord
    payment_status: str
    confirmed: bool           # record is completed and the charge matched it
    applied: bool = False     # this call performed the transition
    note: str = ""


def snapshot_lines(record: CheckoutRecord) -> List[Dict[str, Any]]:
    return [{"unit_price": i.unit_price, "quantity": i.quantity} for i in record.items]


def checkout_total(record: CheckoutRecord):
    return resolve_checkout_total(record.total_price, snapshot_lines(record))


def build_snapshot(cart_items) -> List[Dict[str, Any]]:
    """Copies name, price and image of every cart line from the catalog as it is right now."""
    lines = []
    for item in cart_items:
        if item["deleted"]:
            raise StaleProductError(product_id=item["product_id"])
        lines.append({
            "product_id": item["product_id"],
            "name": item["name"],
            "unit_price": item["price"],
            "quantity": item["quantity"],
            "image": item["image"] or "",
        })
    return lines


async def initialize_checkout(session, gateway, *, user_id: int, user_public_id: str, email: str,
                              shipping_address: str, payment_method: str):
    cart = await get_cart_with_items(session, user_id)
    if cart is None or not cart["items"]:
        raise EmptyCartError()

    lines = build_snapshot(cart["items"])
    total = compute_snapshot_total(lines)

    metadata = {
        "user_id": user_public_id,
        "cart_id": cart["id"],
        "custom_fields": [
            {
                "display_name": "Customer Name",
                "variable_name": "customer_name",
                "value": email.split("@")[0],
            }
        ],
    }

    # nothing is written before the gateway answers, a failed intent leaves no record behind
    intent: PaymentIntent = await gateway.create_intent(
        amount_minor=to_minor_units(total),
        callback_url=f"{config_settings.FRONTEND_URL.rstrip('/')}/payment/verify",
        metadata=metadata,
        email=email,
    )

    record = await create_checkout_record(
        session,
        user_id=user_id,
        cart_id=cart["id"],
        lines=lines,
        total_price=total,
        payment_method=payment_method,
        shipping_address=shipping_address,
        payment_reference=intent.reference,
    )
    record_id = record.id
    await session.commit()

    logger.info("checkout.initialize.success", extra={
        "user_public_id": user_public_id,
        "reference": intent.reference,
        "total_price": str(total),
        "item_count": len(lines),
    })
    return await reload_record(session, record_id), intent


async def clear_cart_for_checkout(session, record: CheckoutRecord) -> bool:
    """
    Empties the cart a completed checkout was paid from.

    Only the transition winner calls this, inside the transaction that moved the record to completed, so the
    clear commits together with the transition and never runs twice for one record.
    """
    cleared = await clear_cart(session, record.cart_id)
    logger.info("checkout.cart.cleared", extra={
        "checkout_id": str(record.public_id),
        "cart_id": record.cart_id,
        "cart_present": cleared,
    })
    return cleared


async def apply_payment_success(session, record: CheckoutRecord, verification: GatewayVerification,
                                source: str) -> ConfirmationOutcome:
    record_id = record.id
    log_ctx = {"checkout_id": str(record.public_id), "reference": record.payment_reference, "source": source}

    if record.status == COMPLETED:
        logger.info("checkout.confirm.already_completed", extra=log_ctx)
        return ConfirmationOutcome(record, PAYMENT_SUCCESS, confirmed=True, note="already processed")

    expected_minor = to_minor_units(checkout_total(record))
    if verification.amount is not None and verification.amount != expected_minor:
        logger.error("checkout.confirm.amount_mismatch", extra={
            **log_ctx, "expected_amount": expected_minor, "charged_amount": verification.amount})
        return ConfirmationOutcome(record, PAYMENT_SUCCESS, confirmed=False, note="amount mismatch")

    if record.status != PENDING:
        # money arrived for a checkout that is already closed, needs a manual refund or reconciliation
        logger.error("checkout.confirm.terminal_record_paid", extra={**log_ctx, "current_status": record.status})
        ensure_transition_allowed(record.status, COMPLETED)

    won = await conditional_transition(session, record_id, PENDING, COMPLETED,
                                       verification.confirmation_fields(GATEWAY_NAME))
    if won is None:
        await session.rollback()
        current = await reload_record(session, record_id)
        if current.status != COMPLETED:
            logger.error("checkout.confirm.terminal_record_paid", extra={**log_ctx, "current_status": current.status})
            raise InvalidStateError(current.status)
        logger.info("checkout.transition.lost_race", extra=log_ctx)
        return ConfirmationOutcome(current, PAYMENT_SUCCESS, confirmed=True, note="already processed")

    await clear_cart_for_checkout(session, record)
    await session.commit()

    logger.info("checkout.transition.completed", extra=log_ctx)
    current = await reload_record(session, record_id)
    return ConfirmationOutcome(current, PAYMENT_SUCCESS, confirmed=True, applied=True, note="checkout completed")


async def apply_payment_failure(session, record: CheckoutRecord, verification: GatewayVerification,
                                source: str) -> ConfirmationOutcome:
    record_id = record.id
    log_ctx = {"checkout_id": str(record.public_id), "reference": record.payment_reference, "source": source,
               "gateway_status": verification.raw_status}

    applied = False
    if record.status == PENDING:
        applied = await conditional_transition(session, record_id, PENDING, FAILED) is not None
        await session.commit()

    if applied:
        logger.info("checkout.transition.failed", extra=log_ctx)
    else:
        logger.info("checkout.transition.failed_noop", extra={**log_ctx, "current_status": record.status})

    current = await reload_record(session, record_id)
    return ConfirmationOutcome(current, PAYMENT_FAILED, confirmed=False, applied=applied, note="payment failed")


async def confirm_by_poll(session, gateway, reference: str, user_id: int) -> ConfirmationOutcome:
    record = await find_by_reference(session, reference)
    if record is None or record.user_id != user_id:
        raise NotFoundError("Checkout not found")

    verification = await gateway.verify(reference)

    if verification.status == PAYMENT_SUCCESS:
        return await apply_payment_success(session, record, verification, source="poll")
    if verification.status == PAYMENT_FAILED:
        return await apply_payment_failure(session, record, verification, source="poll")

    logger.info("checkout.confirm.still_pending", extra={
        "checkout_id": str(record.public_id), "reference": reference, "gateway_status": verification.raw_status})
    return ConfirmationOutcome(record, verification.status, confirmed=False, note="payment not completed")


async def apply_webhook_event(session, event: Dict[str, Any]) -> str:
    """Applies a verified webhook event. Returns a short note for the acknowledgement."""
    event_type = event.get("event")
    data = event.get("data") or {}

    if event_type != SUCCESS_EVENT:
        logger.info("webhook.event.ignored", extra={"event": event_type})
        return f"ignored: {event_type}"

    if not isinstance(data, dict):
        logger.warning("webhook.payload.malformed", extra={"event": event_type})
        return "ignored: malformed payload"

    reference = data.get("reference")
    if not reference or not isinstance(reference, str):
        logger.warning("webhook.event.missing_reference", extra={"event": event_type})
        return "ignored: missing reference"

    record = await find_by_reference(session, reference)
    if record is None:
        raise NotFoundError("Checkout not found", reference=reference)

    # a charge.success event is a success whatever the data.status says
    verification = GatewayVerification.from_payload(data, status=PAYMENT_SUCCESS)
    outcome = await apply_payment_success(session, record, verification, source="webhook")
    return outcome.note


async def cancel_checkout(session, checkout_pid, user_id: int) -> CheckoutRecord:
    record = await find_by_id(session, checkout_pid, user_id)
    if record is None:
        raise NotFoundError("Checkout not found")

    record_id = record.id
    message = f"Cannot cancel checkout with status: {record.status}"
    ensure_transition_allowed(record.status, CANCELLED, message)

    won = await conditional_transition(session, record_id, PENDING, CANCELLED)
    if won is None:
        # a confirmation got there first
        await session.rollback()
        current = await reload_record(session, record_id)
        raise InvalidStateError(current.status, f"Cannot cancel checkout with status: {current.status}")

    await session.commit()
    logger.info("checkout.transition.cancelled", extra={"checkout_id": str(record.public_id)})
    return await reload_record(session, record_id)


async def get_checkout(session, checkout_pid, user_id: int) -> CheckoutRecord:
    record = await find_by_id(session, checkout_pid, user_id)
    if record is None:
        raise NotFoundError("Checkout not found")
    return record
