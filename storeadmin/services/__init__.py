from storeadmin.services.coupon_service import refresh_coupon_statuses, validate_coupon
from storeadmin.services.discount_service import best_discount_for_product, bulk_discounts
from storeadmin.services.inventory_service import adjust_stock, reduce_for_order
from storeadmin.services.product_service import create_product
from storeadmin.services.promotion_status import refresh_statuses

__all__ = [
    "adjust_stock",
    "best_discount_for_product",
    "bulk_discounts",
    "create_product",
    "reduce_for_order",
    "refresh_coupon_statuses",
    "refresh_statuses",
    "validate_coupon",
]
