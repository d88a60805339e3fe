# =======================================================================================
# doorcheck/utils/__init__.py - Utils Package
# =======================================================================================
from .exceptions import *
from .validators import *

__all__ = [
    "DoorcheckError", "MisconfigurationError", "InvalidCredentialError", "BadRequestError",
    "NotFoundError", "EventNotFoundError", "is_digits_only", "clean", "normalize_email",
    "normalize_phone", "parse_bool", "as_datetime",
]
