import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from storeadmin.core.constants import (
    DISCOUNT_STATUSES,
    DISCOUNT_TARGET_TYPES,
    STATUS_ACTIVE,
    STATUS_FUTURE_PLAN,
    STATUS_INACTIVE,
)
from storeadmin.core.errors import NotFoundError, ValidationError
from storeadmin.core.status_rules import derive_discount_status, is_active, match_label, validate_date_range
from storeadmin.models.discount import Discount
from storeadmin.services.promotion_status import refresh_statuses

logger = logging.getLogger(__name__)

TARGET_ALL = "All"
TARGET_PRODUCT = "Product"

_EDITABLE_FIELDS = (
    "target_type",
    "target",
    "percentage",
    "description",
    "apply_to_all_products",
    "start_date",
    "end_date",
)


def _normalize_target(target_type, target, apply_to_all_products=None):
    """Resolve the target; ``apply_to_all_products`` of None means derive it from the type."""
    target_type = (target_type or "").strip()
    if target_type not in DISCOUNT_TARGET_TYPES:
        raise ValidationError(
            "target_type must be one of: {}.".format(", ".join(DISCOUNT_TARGET_TYPES)),
            details={"target_type": target_type},
        )
    if apply_to_all_products is not None and bool(apply_to_all_products) != (target_type == TARGET_ALL):
        raise ValidationError(
            "apply_to_all_products requires target_type All.",
            details={"target_type": target_type, "apply_to_all_products": apply_to_all_products},
        )
    target = (target or "").strip()
    if target_type == TARGET_ALL:
        return target_type, "", True
    if not target:
        raise ValidationError(
            "target is required for {} discounts.".format(target_type),
            details={"field": "target"},
        )
    return target_type, target, False


def _validate_percentage(percentage) -> float:
    if percentage is None:
        raise ValidationError("percentage is required.", details={"field": "percentage"})
    percentage = float(percentage)
    if percentage < 0 or percentage > 100:
        raise ValidationError(
            "percentage must be between 0 and 100.",
            details={"percentage": percentage},
        )
    return percentage


def _apply_fields(discount: Discount, fields: dict, today=None) -> Discount:
    start, end = validate_date_range(fields.get("start_date"), fields.get("end_date"))
    target_type, target, apply_all = _normalize_target(
        fields.get("target_type"),
        fields.get("target"),
        fields.get("apply_to_all_products"),
    )
    percentage = _validate_percentage(fields.get("percentage"))
    discount.target_type = target_type
    discount.target = target
    discount.apply_to_all_products = apply_all
    discount.percentage = percentage
    discount.description = fields.get("description") or ""
    discount.start_date = start
    discount.end_date = end
    discount.status = derive_discount_status(start, end, today)
    return discount


def create_discount(db: Session, payload, today=None) -> Discount:
    fields = payload.model_dump(include=set(_EDITABLE_FIELDS))
    if "apply_to_all_products" not in payload.model_fields_set:
        fields["apply_to_all_products"] = None
    discount = _apply_fields(Discount(), fields, today)
    db.add(discount)
    db.commit()
    db.refresh(discount)
    logger.info(
        "Created discount %s (%s %s, %s%%) status=%s",
        discount.id,
        discount.target_type,
        discount.target,
        discount.percentage,
        discount.status,
    )
    return discount


def get_discount(db: Session, discount_id: int, today=None) -> Discount:
    discount = db.get(Discount, discount_id)
    if discount is None:
        raise NotFoundError("Discount not found.", details={"discount_id": discount_id})
    current = derive_discount_status(discount.start_date, discount.end_date, today)
    if discount.status != current:
        discount.status = current
        db.commit()
    return discount


def update_discount(db: Session, discount_id: int, payload, today=None) -> Discount:
    discount = get_discount(db, discount_id, today)
    changes = payload.model_dump(include=set(_EDITABLE_FIELDS), exclude_unset=True)
    fields = {name: getattr(discount, name) for name in _EDITABLE_FIELDS}
    fields.update(changes)
    # The stored flag follows the stored type; only a flag sent in this request is checked.
    flag = changes.get("apply_to_all_products")
    if flag and "target_type" not in changes:
        fields["target_type"] = TARGET_ALL
    fields["apply_to_all_products"] = flag
    try:
        _apply_fields(discount, fields, today)
    except ValidationError:
        db.rollback()
        raise
    db.commit()
    db.refresh(discount)
    logger.info("Updated discount %s status=%s", discount.id, discount.status)
    return discount


def delete_discount(db: Session, discount_id: int) -> None:
    discount = db.get(Discount, discount_id)
    if discount is None:
        raise NotFoundError("Discount not found.", details={"discount_id": discount_id})
    db.delete(discount)
    db.commit()
    logger.info("Deleted discount %s", discount_id)


def list_discounts(db: Session, status: Optional[str] = None, today=None):
    refresh_statuses(db, Discount, derive_discount_status, today=today)
    rows = db.execute(select(Discount).order_by(Discount.id)).scalars().all()
    counts = {
        "total": len(rows),
        "active": sum(1 for row in rows if row.status == STATUS_ACTIVE),
        "inactive": sum(1 for row in rows if row.status == STATUS_INACTIVE),
        "future_plan": sum(1 for row in rows if row.status == STATUS_FUTURE_PLAN),
    }
    items = rows
    if status:
        wanted = match_label(status, DISCOUNT_STATUSES)
        items = [row for row in rows if row.status == wanted]
    return items, counts


def _best_active(discounts, today=None) -> Optional[Discount]:
    active = [
        discount
        for discount in discounts
        if is_active(discount.start_date, discount.end_date, today)
    ]
    if not active:
        return None
    return max(active, key=lambda discount: (discount.percentage, discount.id))


def best_discount_for_product(db: Session, product_id: int, today=None) -> Optional[Discount]:
    rows = db.execute(
        select(Discount).where(
            Discount.target_type == TARGET_PRODUCT,
            Discount.target == str(product_id),
        )
    ).scalars().all()
    return _best_active(rows, today)


def bulk_discounts(db: Session, product_ids, today=None) -> dict[int, Discount]:
    product_ids = list(dict.fromkeys(product_ids or []))
    if not product_ids:
        raise ValidationError("product_ids must not be empty.", details={"field": "product_ids"})

    rows = db.execute(
        select(Discount).where(
            Discount.target_type == TARGET_PRODUCT,
            Discount.target.in_([str(product_id) for product_id in product_ids]),
        )
    ).scalars().all()

    by_product: dict[str, list[Discount]] = {}
    for row in rows:
        by_product.setdefault(row.target, []).append(row)

    result = {}
    for product_id in product_ids:
        best = _best_active(by_product.get(str(product_id), []), today)
        if best is not None:
            result[product_id] = best
    return result


__all__ = [
    "best_discount_for_product",
    "bulk_discounts",
    "create_discount",
    "delete_discount",
    "get_discount",
    "list_discounts",
    "update_discount",
]
