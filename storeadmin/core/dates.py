from datetime import date, datetime, timezone

from storeadmin.config import get_settings
from storeadmin.core.errors import ValidationError


def normalize_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        try:
            return date.fromisoformat(value_text)
        except ValueError:
            pass
        # Full timestamps ("2024-06-01T00:00:00.000Z") only contribute their day.
        try:
            return datetime.fromisoformat(value_text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def parse_calendar_date(value, field: str) -> date:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            "{} is required.".format(field),
            details={"field": field},
        )
    parsed = normalize_date(value)
    if parsed is None:
        raise ValidationError(
            "{} is not a valid date: {!r}".format(field, value),
            details={"field": field, "value": str(value)},
        )
    return parsed


def current_date() -> date:
    if get_settings().STATUS_TZ.lower() == "utc":
        return datetime.now(timezone.utc).date()
    return date.today()


__all__ = ["current_date", "normalize_date", "parse_calendar_date"]
