from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when blank."""
    if value is None:
        return None
    return str(value).strip() or None


def require_non_negative_int(value: Any, field_name: str) -> int:
    """Accept ints and numeric strings (form input); reject bools, fractions and negatives."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")

    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field_name} must be a whole number")
        number = int(value)
    else:
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{field_name} is required")
        try:
            number = int(text)
        except ValueError:
            raise ValidationError(f"{field_name} must be a whole number")

    if number < 0:
        raise ValidationError(f"{field_name} cannot be negative")
    return number


def require_bool(value: Any, field_name: str, default: Optional[bool] = None) -> bool:
    """JSON booleans only; strings like "false" or "yes" are rejected rather than coerced."""
    if value is None and default is not None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value
