from __future__ import annotations

import math
from typing import Any, Optional

from ..core.constants import MAX_HOURS, MIN_HOURS
from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str, *, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return value


def optional_text(value: Any, field_name: str, *, max_length: Optional[int] = None) -> Optional[str]:
    """Blank or missing text is ``None``; anything else must be a string."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_non_empty(value, field_name, max_length=max_length)


def require_member_id(value: Any) -> str:
    """Member ids are emails; compare them case-insensitively."""
    return require_non_empty(value, "email").lower()


def require_positive_hours(value: Any, field_name: str = "hours") -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not math.isfinite(hours):
        raise ValidationError(f"{field_name} must be a number")
    if hours <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    # Stored as DECIMAL(6,2).
    if hours < MIN_HOURS or hours > MAX_HOURS:
        raise ValidationError(f"{field_name} must be between {MIN_HOURS} and {MAX_HOURS}")
    return round(hours, 2)
