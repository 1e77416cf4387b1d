import importlib

from storeadmin.models.coupon import Coupon
from storeadmin.models.discount import Discount
from storeadmin.models.inventory import Inventory
from storeadmin.models.product import Product


def import_all_models() -> None:
    for module_name in (
        "storeadmin.models.coupon",
        "storeadmin.models.discount",
        "storeadmin.models.inventory",
        "storeadmin.models.product",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Coupon",
    "Discount",
    "Inventory",
    "Product",
    "import_all_models",
]
