import json
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.checkout.constants import logger
from storefront.checkout.gateway import PaystackGateway, get_payment_gateway
from storefront.checkout.models import InitializeCheckoutIn
from storefront.checkout.repository import list_history
from storefront.checkout.services import (apply_webhook_event, cancel_checkout, checkout_total, confirm_by_poll,
                                          get_checkout, initialize_checkout)
from storefront.common.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from storefront.common.errors import InvalidSignatureError, InvalidStateError, NotFoundError
from storefront.common.utils import build_error, json_error, page_meta, success_response
from storefront.db.dependencies import get_session
from storefront.schema.full_schema import CheckoutStatus

checkout_router = APIRouter()
webhooks_router = APIRouter()

SIGNATURE_HEADER = "x-paystack-signature"


def serialize_checkout(record):
    payment_details = None
    if record.status == CheckoutStatus.COMPLETED.value:
        payment_details = {
            "gateway": record.gateway,
            "transaction_id": record.transaction_id,
            "paid_at": record.paid_at,
            "channel": record.channel,
            "currency": record.currency,
            "ip_address": record.ip_address,
        }
    return {
        "id": str(record.public_id),
        "status": record.status,
        "total_price": checkout_total(record),
        "payment_method": record.payment_method,
        "shipping_address": record.shipping_address,
        "payment_reference": record.payment_reference,
        "payment_details": payment_details,
        "items": [
            {
                "product_id": i.product_id,
                "name": i.name,
                "unit_price": i.unit_price,
                "quantity": i.quantity,
                "image": i.image,
            }
            for i in record.items
        ],
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


@checkout_router.post("/initialize", status_code=status.HTTP_201_CREATED)
async def initialize(request: Request, payload: InitializeCheckoutIn,
                     session: AsyncSession = Depends(get_session),
                     gateway: PaystackGateway = Depends(get_payment_gateway)):

    logger.info("checkout.initialize.attempt", extra={"user_public_id": request.state.user_public_id})
    record, intent = await initialize_checkout(
        session, gateway,
        user_id=request.state.user_identifier,
        user_public_id=request.state.user_public_id,
        email=request.state.user_email,
        shipping_address=payload.shipping_address,
        payment_method=payload.payment_method.value,
    )
    data = {
        "checkout": serialize_checkout(record),
        "authorization_url": intent.authorization_url,
        "reference": intent.reference,
        "access_code": intent.access_code,
    }
    return success_response(data, status_code=status.HTTP_201_CREATED)


@checkout_router.get("/history")
async def checkout_history(request: Request,
                           status_filter: Optional[CheckoutStatus] = Query(None, alias="status"),
                           page: int = Query(1, ge=1),
                           limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
                           session: AsyncSession = Depends(get_session)):

    rows, total = await list_history(session, request.state.user_identifier,
                                     status_filter.value if status_filter else None, page, limit)
    items = [serialize_checkout(r) for r in rows]
    return success_response({"checkouts": items, **page_meta(total, page, limit, len(items))})


@checkout_router.get("/verify/{reference}")
async def verify_payment(request: Request, reference: str,
                         session: AsyncSession = Depends(get_session),
                         gateway: PaystackGateway = Depends(get_payment_gateway)):

    outcome = await confirm_by_poll(session, gateway, reference.strip(), request.state.user_identifier)
    if outcome.confirmed:
        return success_response(serialize_checkout(outcome.record))

    details = {
        "message": "Payment verification failed",
        "payment_status": outcome.payment_status,
        "checkout_status": outcome.record.status,
    }
    return json_error(build_error(code="PAYMENT_NOT_CONFIRMED", details=details),
                      status_code=status.HTTP_400_BAD_REQUEST)


@checkout_router.put("/{checkout_id}/cancel")
async def cancel(request: Request, checkout_id: str, session: AsyncSession = Depends(get_session)):
    record = await cancel_checkout(session, checkout_id, request.state.user_identifier)
    return success_response(serialize_checkout(record))


@checkout_router.get("/{checkout_id}")
async def get_checkout_by_id(request: Request, checkout_id: str, session: AsyncSession = Depends(get_session)):
    record = await get_checkout(session, checkout_id, request.state.user_identifier)
    return success_response(serialize_checkout(record))


@webhooks_router.post("/webhook")
async def paystack_webhook(request: Request,
                           session: AsyncSession = Depends(get_session),
                           gateway: PaystackGateway = Depends(get_payment_gateway)):
    body = await request.body()

    # nothing is read or written before the signature holds
    if not gateway.verify_signature(body, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("webhook.signature.invalid", extra={"client": request.client.host if request.client else None})
        raise InvalidSignatureError()

    try:
        event = json.loads(body)
    except ValueError:
        logger.warning("webhook.payload.malformed")
        return JSONResponse({"received": True, "note": "ignored: malformed payload"}, status_code=200)
    if not isinstance(event, dict):
        return JSONResponse({"received": True, "note": "ignored: malformed payload"}, status_code=200)

    # past this point the gateway only needs to know the delivery arrived
    try:
        note = await apply_webhook_event(session, event)
    except NotFoundError as e:
        logger.warning("webhook.checkout.not_found", extra={"reference": e.details.get("reference")})
        note = "ignored: checkout not found"
    except InvalidStateError as e:
        note = f"ignored: checkout {e.current_status}"

    return JSONResponse({"received": True, "note": note}, status_code=200)
