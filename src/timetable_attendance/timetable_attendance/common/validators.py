from __future__ import annotations

from ..core.constants import MAX_YEAR, MIN_YEAR
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value, field_name: str) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_year(value, field_name: str = "year") -> int:
    year = require_int(value, field_name)
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"{field_name} must be between {MIN_YEAR} and {MAX_YEAR}")
    return year
