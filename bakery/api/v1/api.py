"""API v1 router composition."""

from fastapi import APIRouter, Depends

from bakery.api.v1.endpoints import (
    admin_delivery,
    admin_exports,
    admin_orders,
    admin_products,
    auth,
    checkout,
    fulfillment,
    products,
)
from bakery.core.security import require_admin

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(products.router, prefix="/products", tags=["storefront"])
api_router.include_router(fulfillment.router, prefix="/fulfillment", tags=["storefront"])
api_router.include_router(checkout.router, prefix="/checkout", tags=["storefront"])

admin_dependencies = [Depends(require_admin)]
api_router.include_router(admin_delivery.router, prefix="/admin", tags=["admin-delivery"], dependencies=admin_dependencies)
api_router.include_router(admin_products.router, prefix="/admin/products", tags=["admin-products"], dependencies=admin_dependencies)
api_router.include_router(admin_orders.router, prefix="/admin/orders", tags=["admin-orders"], dependencies=admin_dependencies)
api_router.include_router(admin_exports.router, prefix="/admin/exports", tags=["admin-exports"], dependencies=admin_dependencies)
