from fastapi import APIRouter
from storefront.api import version_prefix
from storefront.auth.routes import auth_router
from storefront.cart.routes import carts_router
from storefront.checkout.routes import checkout_router, webhooks_router
from storefront.common.routes import home_router
from storefront.products.routes import prods_admin_router, prods_public_router
from storefront.wishlist.routes import wishlist_router

public_routers = APIRouter(prefix=version_prefix)

public_routers.include_router(auth_router, prefix="/auth", tags=["auth"])
public_routers.include_router(prods_public_router, prefix="/products", tags=["products-public"])
public_routers.include_router(carts_router, prefix="/cart", tags=["cart"])
public_routers.include_router(wishlist_router, prefix="/wishlist", tags=["wishlist"])
public_routers.include_router(webhooks_router, prefix="/checkout", tags=["webhooks"])
public_routers.include_router(checkout_router, prefix="/checkout", tags=["checkout"])
public_routers.include_router(home_router, tags=["home"])

#--------------------------------------------------------------------------------------------------------

admin_routers = APIRouter(prefix=f"{version_prefix}/admin")

admin_routers.include_router(prods_admin_router, prefix="/products", tags=["products-admin"])
