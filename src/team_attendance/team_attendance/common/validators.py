from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_month(value: int, field_name: str) -> int:
    try:
        month = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a month number")
    if not 1 <= month <= 12:
        raise ValidationError(f"{field_name} must be between 1 and 12")
    return month


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None


def optional_int(value) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Expected a numeric id, got {value!r}")
