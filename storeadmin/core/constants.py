STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"
STATUS_FUTURE_PLAN = "Future Plan"
STATUS_FUTURE = "Future"

DISCOUNT_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_FUTURE_PLAN)
COUPON_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE, STATUS_FUTURE)

DISCOUNT_TARGET_TYPES = ("Product", "Category", "Sub-category", "All")
COUPON_SCOPES = ("product", "category", "general")
COUPON_ELIGIBILITY = ("new user", "loyalty customers", "all")

IN_STOCK = "In Stock"
OUT_OF_STOCK = "Out Of Stock"
NEWLY_ADDED = "Newly Added"
INVENTORY_STATUSES = (IN_STOCK, OUT_OF_STOCK, NEWLY_ADDED)

NEWLY_ADDED_TAG = "newly-added"
