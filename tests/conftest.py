import os
import tempfile
import uuid

_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")

# settings are read at import time, so the environment has to be in place first
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'storefront.db')}"
os.environ["ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-jwt-secret-with-enough-entropy"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_storefront"
os.environ["ADMIN_CODE"] = "admin-code-for-tests"
os.environ.pop("PAYSTACK_WEBHOOK_SECRET", None)

import json
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlmodel import SQLModel
from storefront.checkout import services as checkout_services
from storefront.checkout.gateway import GatewayVerification, PaymentIntent, PaystackGateway, compute_signature, get_payment_gateway
from storefront.common.errors import GatewayError
from storefront.db.connection import async_engine, async_session
from storefront.main import app
from storefront.schema.full_schema import Cart, CartItem, CheckoutRecord

url_prefix = "/api/v1"
PASSWORD = "StrongPassw0rd!"
ADMIN_CODE = os.environ["ADMIN_CODE"]


class FakeGateway(PaystackGateway):
    """Paystack stand-in: intents are kept in memory, signatures use the real HMAC check."""

    def __init__(self):
        super().__init__(os.environ["PAYSTACK_SECRET_KEY"])
        self.intents = {}
        self.statuses = {}
        self.charged_amounts = {}
        self.fail_create = False
        self.verify_calls = 0

    async def create_intent(self, amount_minor, callback_url, metadata, email):
        if self.fail_create:
            raise GatewayError("paystack unavailable")
        reference = f"ref_{uuid.uuid4().hex[:16]}"
        self.intents[reference] = {
            "amount_minor": amount_minor,
            "callback_url": callback_url,
            "metadata": metadata,
            "email": email,
        }
        self.statuses[reference] = "pending"
        return PaymentIntent(reference=reference,
                             authorization_url=f"https://checkout.paystack.com/{reference}",
                             access_code=f"ac_{reference}")

    def charge_data(self, reference, status=None):
        intent = self.intents.get(reference, {})
        return {
            "id": 4099260516,
            "reference": reference,
            "status": status or self.statuses.get(reference, "pending"),
            "amount": self.charged_amounts.get(reference, intent.get("amount_minor")),
            "paid_at": "2026-10-19T10:15:00.000Z",
            "channel": "card",
            "currency": "NGN",
            "ip_address": "102.89.34.12",
        }

    async def verify(self, reference):
        self.verify_calls += 1
        return GatewayVerification.from_payload(self.charge_data(reference))

    def settle(self, reference, status="success"):
        self.statuses[reference] = status

    def webhook_request(self, reference, event="charge.success"):
        body = json.dumps({"event": event, "data": self.charge_data(reference, status="success")}).encode()
        return body, {"x-paystack-signature": compute_signature(self.webhook_secret, body),
                      "content-type": "application/json"}


@pytest.fixture
async def prepare_db():
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    # pooled connections belong to this test's event loop
    await async_engine.dispose()


@pytest.fixture
def gateway():
    fake = FakeGateway()
    app.dependency_overrides[get_payment_gateway] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)


@pytest.fixture
async def ac_client(prepare_db, gateway):
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac


@pytest.fixture
def cart_clears(monkeypatch):
    """Records every cart clear performed on behalf of a completed checkout."""
    calls = []
    original = checkout_services.clear_cart

    async def counting_clear(session, cart_id):
        calls.append(cart_id)
        return await original(session, cart_id)

    monkeypatch.setattr(checkout_services, "clear_cart", counting_clear)
    return calls


async def register(ac, email, admin=False):
    payload = {"email": email, "password": PASSWORD}
    if admin:
        payload["admin_code"] = ADMIN_CODE
    resp = await ac.post(f"{url_prefix}/auth/register", json=payload)
    assert resp.status_code == 201, resp.text
    token = resp.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


async def create_product(ac, admin_headers, **overrides):
    payload = {
        "name": "USB-C Cable",
        "description": "Braided 1m cable",
        "price": "10.00",
        "stock": 50,
        "category": "Cables",
        "images": ["https://cdn.shop.io/cable.png"],
    }
    payload.update(overrides)
    resp = await ac.post(f"{url_prefix}/admin/products", json=payload, headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def add_to_cart(ac, headers, product_id, quantity):
    resp = await ac.post(f"{url_prefix}/cart", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def initialize(ac, headers, payment_method="Debit Card"):
    return await ac.post(f"{url_prefix}/checkout/initialize",
                         json={"shipping_address": "12 Admiralty Way, Lekki, Lagos", "payment_method": payment_method},
                         headers=headers)


@pytest.fixture
async def admin_headers(ac_client):
    return await register(ac_client, "admin@shop.io", admin=True)


@pytest.fixture
async def user_headers(ac_client):
    return await register(ac_client, "ada@shop.io")


@pytest.fixture
async def cable(ac_client, admin_headers):
    return await create_product(ac_client, admin_headers)


@pytest.fixture
async def charger(ac_client, admin_headers):
    return await create_product(ac_client, admin_headers, name="GaN Charger 65W", price="35.50",
                                stock=5, category="Chargers", images=["https://cdn.shop.io/charger.png"])


@pytest.fixture
async def pending_checkout(ac_client, user_headers, cable):
    """Cart {cable x2 @ 10.00} turned into a pending checkout."""
    await add_to_cart(ac_client, user_headers, cable["id"], 2)
    resp = await initialize(ac_client, user_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def checkout_count():
    async with async_session() as session:
        return (await session.execute(select(func.count(CheckoutRecord.id)))).scalar_one()


async def checkout_status(reference):
    async with async_session() as session:
        res = await session.execute(
            select(CheckoutRecord.status).where(CheckoutRecord.payment_reference == reference))
        return res.scalar_one()


async def cart_item_count(cart_id):
    async with async_session() as session:
        res = await session.execute(select(func.count(CartItem.id)).where(CartItem.cart_id == cart_id))
        return res.scalar_one()


async def cart_total(cart_id):
    async with async_session() as session:
        return (await session.execute(select(Cart.total_price).where(Cart.id == cart_id))).scalar_one()
