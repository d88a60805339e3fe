# =======================================================================================
# doorcheck/utils/validators.py - Validation Helpers
# =======================================================================================
import re
from datetime import datetime
from typing import Optional

_DIGITS_ONLY = re.compile(r"[0-9]+")


def is_digits_only(value: str) -> bool:
    return _DIGITS_ONLY.fullmatch(value) is not None


def clean(value: Optional[str]) -> Optional[str]:
    """Strip a string; empty becomes None."""
    v = (value or "").strip()
    return v or None


def normalize_email(email: Optional[str]) -> Optional[str]:
    e = (email or "").strip().lower()
    return e or None


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    p = re.sub(r"[^\d+]", "", (phone or "").strip())
    return p or None


def parse_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "y", "x")


def as_datetime(value) -> Optional[datetime]:
    """Rows from text() queries may carry timestamps as strings on some drivers."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
