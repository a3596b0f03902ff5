"""Validation helpers shared across household budget services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from .exceptions import ValidationError
from .models import FIXED_CATEGORY_TYPE, parse_date

CATEGORY_TYPES = {
    FIXED_CATEGORY_TYPE,
    "semi_fixed",
    "one_time",
    "daily",
}


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a finite, non-negative Decimal."""
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")
    return amount


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str, max_length: int) -> Optional[str]:
    if value is None or value == "":
        return None
    return validate_required_str(value, field, max_length)


def validate_int(value: object, field: str) -> int:
    """Accept ints and digit strings; booleans are rejected even though they are ints."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValidationError(f"{field} must be an integer") from exc
    raise ValidationError(f"{field} must be an integer")


def validate_date(value: object, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return parse_date(value)
        except ValueError as exc:
            raise ValidationError(f"{field} must be an ISO 8601 date (YYYY-MM-DD)") from exc
    raise ValidationError(f"{field} must be a date or ISO 8601 string")


def validate_enum(value: object, field: str, allowed: Iterable[str]) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = value.strip().lower()
    if canonical not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(sorted(allowed))}")
    return canonical


def validate_fiscal_start_month(value: object, field: str = "fiscal_start_month") -> int:
    month = validate_int(value, field)
    if not 1 <= month <= 12:
        raise ValidationError(f"{field} must be between 1 and 12")
    return month


def validate_bool(value: object, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        canonical = value.strip().lower()
        if canonical in {"1", "true", "yes", "on"}:
            return True
        if canonical in {"0", "false", "no", "off", ""}:
            return False
    raise ValidationError(f"{field} must be a boolean")
