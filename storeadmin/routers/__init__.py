from storeadmin.routers.coupons import router as coupons_router
from storeadmin.routers.discounts import router as discounts_router
from storeadmin.routers.health import router as health_router
from storeadmin.routers.inventory import router as inventory_router
from storeadmin.routers.products import router as products_router

__all__ = [
    "coupons_router",
    "discounts_router",
    "health_router",
    "inventory_router",
    "products_router",
]
