from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from .time_utils import parse_iso_datetime


# Maximum amount: Rs. 9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical amounts
MAX_AMOUNT_CENTS = 999_999_999


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def coerce_int(field: str, value: Any) -> int:
    """
    Strict integer coercion for JSON input.

    Accepts ints and plain digit strings; rejects bools, floats, decimals
    and scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def coerce_positive_int(field: str, value: Any) -> int:
    result = coerce_int(field, value)
    if result <= 0:
        raise ValidationError(f"{field} must be > 0")
    return result


def coerce_cents(field: str, value: Any, *, allow_none: bool = False) -> int | None:
    """Non-negative amount in cents, capped at MAX_AMOUNT_CENTS."""
    if value is None:
        if allow_none:
            return None
        raise ValidationError(f"{field} is required")
    cents = coerce_int(field, value)
    if cents < 0:
        raise ValidationError(f"{field} must be >= 0")
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{field} cannot exceed {MAX_AMOUNT_CENTS}")
    return cents


def coerce_number(field: str, value: Any) -> float:
    """Finite int or float (or numeric string); bools, NaN and infinities are rejected."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")
    if not math.isfinite(result):
        raise ValidationError(f"{field} must be a finite number")
    return result


def coerce_datetime(field: str, value: Any) -> datetime | None:
    """ISO-8601 string (or datetime) normalized to UTC-naive; empty -> None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO-8601 datetime")
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO-8601 datetime")


def clean_str(value: Any, *, max_length: int | None = None, field: str = "value") -> str | None:
    """Strip strings; blank -> None."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if max_length and len(text) > max_length:
        raise ValidationError(f"{field} exceeds max length {max_length}")
    return text


def require_json_object(data: Any) -> dict:
    """Request body as a dict; a missing body is an empty one."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    return data
