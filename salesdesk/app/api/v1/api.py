from fastapi import APIRouter

from salesdesk.app.api.v1.endpoints import (
    auth,
    customers,
    dashboard,
    invoices,
    product_types,
    products,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(product_types.router, prefix="/product-types", tags=["product-types"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(customers.router, prefix="/customers", tags=["customers"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
