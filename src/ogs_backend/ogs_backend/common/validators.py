from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def reject_empty(value: Optional[str], field_name: str) -> Optional[str]:
    """Optional field on partial updates: absent is fine, blank is not."""
    if value is None:
        return None
    if not str(value).strip():
        raise ValidationError(f"{field_name} cannot be empty")
    return str(value).strip()


def parse_id(value: Any, field_name: str = "ID") -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"invalid {field_name}")
    if parsed <= 0:
        raise ValidationError(f"invalid {field_name}")
    return parsed


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be a boolean")
