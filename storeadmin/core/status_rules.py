"""Lifecycle labels for time-bounded promotions (discounts and coupons).

A stored label goes stale as days pass, so callers recompute it from the
date range on every read instead of trusting the persisted value.
"""

from storeadmin.core.constants import (
    STATUS_ACTIVE,
    STATUS_FUTURE,
    STATUS_FUTURE_PLAN,
    STATUS_INACTIVE,
)
from storeadmin.core.dates import current_date, parse_calendar_date
from storeadmin.core.errors import ValidationError


def validate_date_range(start_date, end_date):
    start = parse_calendar_date(start_date, "startDate")
    end = parse_calendar_date(end_date, "endDate")
    if end < start:
        raise ValidationError(
            "endDate must be on or after startDate.",
            details={"startDate": start.isoformat(), "endDate": end.isoformat()},
        )
    return start, end


def derive_status(start_date, end_date, today=None, *, future_label=STATUS_FUTURE_PLAN):
    start, end = validate_date_range(start_date, end_date)
    today = current_date() if today is None else parse_calendar_date(today, "today")
    if today < start:
        return future_label
    if today > end:
        return STATUS_INACTIVE
    return STATUS_ACTIVE


def derive_discount_status(start_date, end_date, today=None):
    return derive_status(start_date, end_date, today, future_label=STATUS_FUTURE_PLAN)


def derive_coupon_status(start_date, end_date, today=None):
    return derive_status(start_date, end_date, today, future_label=STATUS_FUTURE)


def is_active(start_date, end_date, today=None, *, future_label=STATUS_FUTURE_PLAN) -> bool:
    return derive_status(start_date, end_date, today, future_label=future_label) == STATUS_ACTIVE


def match_label(value, labels, field: str = "status") -> str:
    """Resolve a user-supplied label case-insensitively against ``labels``."""
    wanted = (value or "").strip().lower()
    for label in labels:
        if label.lower() == wanted:
            return label
    raise ValidationError(
        "{} must be one of: {}.".format(field, ", ".join(labels)),
        details={field: value},
    )


__all__ = [
    "derive_coupon_status",
    "derive_discount_status",
    "derive_status",
    "is_active",
    "match_label",
    "validate_date_range",
]
