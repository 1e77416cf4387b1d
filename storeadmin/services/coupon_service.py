import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storeadmin.core.constants import (
    COUPON_ELIGIBILITY,
    COUPON_SCOPES,
    COUPON_STATUSES,
    STATUS_ACTIVE,
    STATUS_FUTURE,
    STATUS_INACTIVE,
)
from storeadmin.core.errors import ConflictError, NotFoundError, ValidationError
from storeadmin.core.status_rules import derive_coupon_status, is_active, match_label, validate_date_range
from storeadmin.models.coupon import Coupon
from storeadmin.services.promotion_status import refresh_statuses

logger = logging.getLogger(__name__)

SCOPE_GENERAL = "general"
SCOPE_PRODUCT = "product"

_EDITABLE_FIELDS = (
    "code",
    "scope",
    "target",
    "price",
    "discount",
    "min_order_value",
    "description",
    "customer_eligibility",
    "usage_limit",
    "one_time_use",
    "start_date",
    "end_date",
)


def normalize_code(code) -> str:
    return (code or "").strip().upper()


def _find_by_code(db: Session, code: str) -> Optional[Coupon]:
    return db.execute(select(Coupon).where(Coupon.code == code)).scalars().first()


def _validated_fields(fields: dict) -> dict:
    code = normalize_code(fields.get("code"))
    if not code:
        raise ValidationError("code is required.", details={"field": "code"})

    scope = (fields.get("scope") or SCOPE_GENERAL).strip().lower()
    if scope not in COUPON_SCOPES:
        raise ValidationError(
            "scope must be one of: {}.".format(", ".join(COUPON_SCOPES)),
            details={"scope": scope},
        )
    target = (fields.get("target") or "").strip()
    if scope == SCOPE_GENERAL:
        target = ""
    elif not target:
        raise ValidationError(
            "target is required for {} coupons.".format(scope),
            details={"field": "target"},
        )

    eligibility = (fields.get("customer_eligibility") or "all").strip().lower()
    if eligibility not in COUPON_ELIGIBILITY:
        raise ValidationError(
            "customer_eligibility must be one of: {}.".format(", ".join(COUPON_ELIGIBILITY)),
            details={"customer_eligibility": eligibility},
        )

    discount = fields.get("discount")
    if discount is None or not 0 <= float(discount) <= 100:
        raise ValidationError(
            "discount must be a percentage between 0 and 100.",
            details={"discount": discount},
        )

    usage_limit = int(fields.get("usage_limit") or 0)
    if usage_limit < 0:
        raise ValidationError("usage_limit must not be negative.", details={"usage_limit": usage_limit})

    min_order_value = fields.get("min_order_value")
    if min_order_value is not None and float(min_order_value) < 0:
        raise ValidationError(
            "min_order_value must not be negative.",
            details={"min_order_value": min_order_value},
        )

    start, end = validate_date_range(fields.get("start_date"), fields.get("end_date"))
    return {
        "code": code,
        "scope": scope,
        "target": target,
        "price": fields.get("price"),
        "discount": float(discount),
        "min_order_value": min_order_value,
        "description": fields.get("description") or "",
        "customer_eligibility": eligibility,
        "usage_limit": usage_limit,
        "one_time_use": bool(fields.get("one_time_use")),
        "start_date": start,
        "end_date": end,
    }


def _commit_unique(db: Session, coupon: Coupon) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            "Coupon code already exists.",
            details={"code": coupon.code},
        ) from exc


def create_coupon(db: Session, payload, today=None) -> Coupon:
    values = _validated_fields(payload.model_dump(include=set(_EDITABLE_FIELDS)))
    if _find_by_code(db, values["code"]) is not None:
        raise ConflictError("Coupon code already exists.", details={"code": values["code"]})

    coupon = Coupon(**values)
    coupon.status = derive_coupon_status(coupon.start_date, coupon.end_date, today)
    db.add(coupon)
    _commit_unique(db, coupon)
    db.refresh(coupon)
    logger.info("Created coupon %s (%s) status=%s", coupon.id, coupon.code, coupon.status)
    return coupon


def get_coupon(db: Session, coupon_id: int, today=None) -> Coupon:
    coupon = db.get(Coupon, coupon_id)
    if coupon is None:
        raise NotFoundError("Coupon not found.", details={"coupon_id": coupon_id})
    current = derive_coupon_status(coupon.start_date, coupon.end_date, today)
    if coupon.status != current:
        coupon.status = current
        db.commit()
    return coupon


def update_coupon(db: Session, coupon_id: int, payload, today=None) -> Coupon:
    coupon = get_coupon(db, coupon_id, today)
    fields = {name: getattr(coupon, name) for name in _EDITABLE_FIELDS}
    fields.update(payload.model_dump(include=set(_EDITABLE_FIELDS), exclude_unset=True))
    values = _validated_fields(fields)

    if values["code"] != coupon.code:
        other = _find_by_code(db, values["code"])
        if other is not None and other.id != coupon.id:
            raise ConflictError("Coupon code already exists.", details={"code": values["code"]})

    for name, value in values.items():
        setattr(coupon, name, value)
    coupon.status = derive_coupon_status(coupon.start_date, coupon.end_date, today)
    _commit_unique(db, coupon)
    db.refresh(coupon)
    logger.info("Updated coupon %s (%s) status=%s", coupon.id, coupon.code, coupon.status)
    return coupon


def delete_coupon(db: Session, coupon_id: int) -> None:
    coupon = db.get(Coupon, coupon_id)
    if coupon is None:
        raise NotFoundError("Coupon not found.", details={"coupon_id": coupon_id})
    db.delete(coupon)
    db.commit()
    logger.info("Deleted coupon %s", coupon_id)


def list_coupons(db: Session, status: Optional[str] = None, today=None):
    """Return the filtered items and the per-status counts of all coupons."""
    refresh_statuses(db, Coupon, derive_coupon_status, today=today)
    rows = db.execute(select(Coupon).order_by(Coupon.id)).scalars().all()
    counts = {
        "total": len(rows),
        "active": sum(1 for row in rows if row.status == STATUS_ACTIVE),
        "inactive": sum(1 for row in rows if row.status == STATUS_INACTIVE),
        "future": sum(1 for row in rows if row.status == STATUS_FUTURE),
    }
    items = list(rows)
    if status:
        wanted = match_label(status, COUPON_STATUSES)
        items = [row for row in rows if row.status == wanted]
    return items, counts


def refresh_coupon_statuses(db: Session, *, dry_run: bool = False, today=None) -> list[dict]:
    return refresh_statuses(db, Coupon, derive_coupon_status, today=today, dry_run=dry_run)


def validate_coupon(db: Session, code: str, subtotal: float, today=None) -> dict:
    """Check a code at checkout and price the reduction it grants."""
    normalized = normalize_code(code)
    coupon = _find_by_code(db, normalized) if normalized else None
    if coupon is None:
        raise NotFoundError("Invalid coupon code.", details={"code": code})

    status = derive_coupon_status(coupon.start_date, coupon.end_date, today)
    if status == STATUS_FUTURE:
        logger.warning("Coupon %s used before its start date", coupon.code)
        raise ValidationError(
            "Coupon is not active yet.",
            details={"code": coupon.code, "start_date": coupon.start_date.isoformat()},
        )
    if status == STATUS_INACTIVE:
        logger.warning("Expired coupon %s presented", coupon.code)
        raise ValidationError(
            "Coupon has expired.",
            details={"code": coupon.code, "end_date": coupon.end_date.isoformat()},
        )

    subtotal = float(subtotal)
    if coupon.min_order_value is not None and subtotal < coupon.min_order_value:
        raise ValidationError(
            "Order subtotal must be at least {:.2f} to use this coupon.".format(coupon.min_order_value),
            details={"code": coupon.code, "min_order_value": coupon.min_order_value},
        )

    percentage = float(coupon.discount or 0)
    if percentage <= 0 or percentage > 100:
        raise ValidationError(
            "Coupon has an invalid discount percentage.",
            details={"code": coupon.code, "discount": percentage},
        )

    amount = round(subtotal * percentage / 100, 2)
    return {
        "valid": True,
        "coupon_id": coupon.id,
        "code": coupon.code,
        "discount_percentage": percentage,
        "discount_amount": amount,
        "final_total": round(subtotal - amount, 2),
    }


def best_coupon_for_product(db: Session, product_id: int, today=None) -> Optional[Coupon]:
    rows = db.execute(
        select(Coupon).where(
            Coupon.scope == SCOPE_PRODUCT,
            Coupon.target == str(product_id),
        )
    ).scalars().all()
    active = [
        row
        for row in rows
        if is_active(row.start_date, row.end_date, today, future_label=STATUS_FUTURE)
    ]
    if not active:
        return None
    return max(active, key=lambda row: (row.discount, row.id))


__all__ = [
    "best_coupon_for_product",
    "create_coupon",
    "delete_coupon",
    "get_coupon",
    "list_coupons",
    "normalize_code",
    "refresh_coupon_statuses",
    "update_coupon",
    "validate_coupon",
]
