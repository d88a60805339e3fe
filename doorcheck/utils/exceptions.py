# =======================================================================================
# doorcheck/utils/exceptions.py - Custom Exceptions
# =======================================================================================
class DoorcheckError(Exception):
    """Base exception for the door check-in service; carries its HTTP status."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class MisconfigurationError(DoorcheckError):
    """Raised when required server-side configuration is missing."""
    status_code = 500

class InvalidCredentialError(DoorcheckError):
    """Raised when the caller's shared secret is missing or wrong."""
    status_code = 401

class BadRequestError(DoorcheckError):
    """Raised when required request fields are missing or invalid."""
    status_code = 400

class NotFoundError(DoorcheckError):
    """Raised when a referenced record does not exist."""
    status_code = 404

class EventNotFoundError(NotFoundError):
    """Raised when the target event cannot be resolved."""

    def __init__(self, message: str = "Event not found"):
        super().__init__(message)
