import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
import httpx
from fastapi import Request
from storefront.checkout.constants import (GATEWAY_FAILED_STATUSES, GATEWAY_PENDING_STATUSES, PAYMENT_FAILED,
                                           PAYMENT_PENDING, PAYMENT_SUCCESS, logger)
from storefront.common.errors import GatewayError
from storefront.common.retries import TRANSIENT_EXCEPTIONS, retry_async


@dataclass(frozen=True)
class PaymentIntent:
    reference: str
    authorization_url: str
    access_code: str


@dataclass(frozen=True)
class GatewayVerification:
    status: str                      # success | failed | pending
    raw_status: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    channel: Optional[str] = None
    currency: Optional[str] = None
    ip_address: Optional[str] = None
    amount: Optional[int] = None     # minor units

    @classmethod
    def from_payload(cls, data: Dict[str, Any], status: Optional[str] = None) -> "GatewayVerification":
        """Builds a verification from a paystack transaction object (verify response or webhook data)."""
        raw_status = data.get("status")
        amount = data.get("amount")
        try:
            amount = int(amount) if amount is not None else None
        except (TypeError, ValueError):
            amount = None
        transaction_id = data.get("id")
        return cls(
            status=status or normalize_payment_status(raw_status),
            raw_status=raw_status,
            transaction_id=str(transaction_id) if transaction_id is not None else None,
            paid_at=parse_gateway_datetime(data.get("paid_at") or data.get("paidAt")),
            channel=data.get("channel"),
            currency=data.get("currency"),
            ip_address=data.get("ip_address"),
            amount=amount,
        )

    def confirmation_fields(self, gateway_name: str) -> Dict[str, Any]:
        return {
            "gateway": gateway_name,
            "transaction_id": self.transaction_id,
            "paid_at": self.paid_at,
            "channel": self.channel,
            "currency": self.currency,
            "ip_address": self.ip_address,
        }


def normalize_payment_status(raw_status: Optional[str]) -> str:
    status = (raw_status or "").strip().lower()
    if status == PAYMENT_SUCCESS:
        return PAYMENT_SUCCESS
    if status in GATEWAY_FAILED_STATUSES:
        return PAYMENT_FAILED
    if status in GATEWAY_PENDING_STATUSES:
        return PAYMENT_PENDING
    # unknown statuses never complete or fail a checkout
    logger.warning("gateway.status.unknown", extra={"gateway_status": raw_status})
    return PAYMENT_PENDING


def parse_gateway_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("gateway.paid_at.unparsable", extra={"value": str(value)})
        return None


def compute_signature(secret: str, raw_body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body or b"", hashlib.sha512).hexdigest()


class PaystackGateway:
    """Paystack transaction API client carrying its own credentials."""

    name = "paystack"

    def __init__(self, secret_key: str, *, webhook_secret: Optional[str] = None,
                 base_url: str = "https://api.paystack.co", timeout: float = 10.0,
                 verify_retries: int = 3, currency: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        if not secret_key:
            raise ValueError("paystack secret key is required")
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret or secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verify_retries = max(1, verify_retries)
        self.currency = currency
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _request(self, method: str, path: str, payload: Optional[dict] = None) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            resp = await client.request(method, f"{self.base_url}{path}", json=payload, headers=self._headers())
            resp.raise_for_status()
            body = resp.json()

        if not isinstance(body, dict) or not body.get("status"):
            message = body.get("message") if isinstance(body, dict) else None
            raise GatewayError(message or "paystack rejected request")
        return body.get("data") or {}

    async def create_intent(self, amount_minor: int, callback_url: str, metadata: Dict[str, Any],
                            email: str) -> PaymentIntent:
        payload: Dict[str, Any] = {
            "email": email,
            "amount": int(amount_minor),
            "callback_url": callback_url,
            "metadata": metadata or {},
        }
        if self.currency:
            payload["currency"] = self.currency

        # a retried initialize could open a second transaction at paystack, so this is tried once
        try:
            data = await self._request("POST", "/transaction/initialize", payload)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("gateway.create_intent.failed", extra={"error": str(e), "amount_minor": amount_minor})
            raise GatewayError(str(e)) from e

        reference = data.get("reference")
        authorization_url = data.get("authorization_url")
        if not reference or not authorization_url:
            logger.error("gateway.create_intent.malformed", extra={"keys": sorted(data)})
            raise GatewayError("paystack initialize response missing reference")

        return PaymentIntent(reference=reference, authorization_url=authorization_url,
                             access_code=data.get("access_code") or "")

    async def verify(self, reference: str) -> GatewayVerification:
        fetch = retry_async(attempts=self.verify_retries)(self._request)
        try:
            data = await fetch("GET", f"/transaction/verify/{reference}")
        except TRANSIENT_EXCEPTIONS as e:
            logger.error("gateway.verify.unreachable", extra={"reference": reference, "error": str(e)})
            raise GatewayError(str(e)) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("gateway.verify.failed", extra={"reference": reference, "error": str(e)})
            raise GatewayError(str(e)) from e

        return GatewayVerification.from_payload(data)

    def verify_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        """HMAC-SHA512 hex digest of the raw body, keyed with the webhook secret. Has no side effects."""
        if not signature:
            return False
        expected = compute_signature(self.webhook_secret, raw_body)
        return hmac.compare_digest(expected, signature.strip())


def get_payment_gateway(request: Request) -> PaystackGateway:
    return request.app.state.payment_gateway
