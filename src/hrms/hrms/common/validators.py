from __future__ import annotations

import re
from datetime import MAXYEAR, MINYEAR
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_email(value: str) -> str:
    value = require_non_empty(value, "Email").lower()
    if not _EMAIL_RE.match(value):
        raise ValidationError("Email is not valid")
    return value


def require_non_negative(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def require_int(value, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def require_month_year(month, year) -> tuple[int, int]:
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise ValidationError("Month and year are required")
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"Year must be between {MINYEAR} and {MAXYEAR}")
    return month, year


def optional_enum(enum_cls, value: Optional[str], field_name: str):
    if value in (None, ""):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"{field_name} is not valid")
