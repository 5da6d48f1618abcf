from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_unit_interval(value: float, field_name: str) -> float:
    value = float(value)
    if value < 0.0 or value > 1.0:
        raise ValidationError(f"{field_name} must be between 0 and 1")
    return value


def parse_bool(value: Any, field_name: str) -> bool:
    """JSON booleans, 0/1 and the strings true/false/yes/no/1/0."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"true", "yes", "1"}:
            return True
        if text in {"false", "no", "0"}:
            return False
    raise ValidationError(f"{field_name} must be a boolean")
