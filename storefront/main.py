from contextlib import asynccontextmanager
from fastapi import FastAPI
from storefront.api import cur_version, version_prefix
from storefront.api.routers import admin_routers, public_routers
from storefront.checkout.gateway import PaystackGateway
from storefront.common.custom_exceptions import register_all_exceptions
from storefront.common.logging_setup import setup_logging, shutdown_logging
from storefront.config.settings import config_settings
from storefront.db.connection import async_engine, async_session
from storefront.middlewares.auth_middleware import AuthenticationMiddleware
from storefront.middlewares.request_id_middleware import RequestIdMiddleware


def build_payment_gateway() -> PaystackGateway:
    return PaystackGateway(
        config_settings.PAYSTACK_SECRET_KEY,
        webhook_secret=config_settings.PAYSTACK_WEBHOOK_SECRET,
        base_url=config_settings.PAYSTACK_BASE_URL,
        timeout=config_settings.PAYSTACK_TIMEOUT_SECONDS,
        verify_retries=config_settings.PAYSTACK_VERIFY_RETRIES,
        currency=config_settings.CHECKOUT_CURRENCY,
    )


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    setup_logging()
    app.state.payment_gateway = build_payment_gateway()

    try:
        yield
    finally:
        # new requests are no longer accepted at this point
        await async_engine.dispose()
        shutdown_logging()


def create_app():
    app = FastAPI(
        title="Storefront",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)
    app.include_router(admin_routers)      # mounts /api/v1/admin

    app.add_middleware(AuthenticationMiddleware, session_maker=async_session,
                       paths=[f"{version_prefix}/auth/register",
                              f"{version_prefix}/auth/login",
                              f"{version_prefix}/health",
                              f"{version_prefix}/products",          # public catalog reads
                              f"{version_prefix}/checkout/webhook",  # authenticated by signature
                              "/docs",
                              "/redoc",
                              "/openapi.json"])
    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    return app


app = create_app()
