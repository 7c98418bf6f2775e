from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive(value: int, field_name: str) -> int:
    if value is None or int(value) <= 0:
        raise ValidationError(f"{field_name} must be positive")
    return int(value)


def require_hour(value: int, field_name: str) -> int:
    if value is None or not 0 <= int(value) <= 23:
        raise ValidationError(f"{field_name} must be between 0 and 23")
    return int(value)
