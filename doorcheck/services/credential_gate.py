# =======================================================================================
# doorcheck/services/credential_gate.py - Shared-Secret Check
# =======================================================================================
import hmac
import logging
from typing import Optional

from ..utils.exceptions import InvalidCredentialError, MisconfigurationError

logger = logging.getLogger(__name__)


class CredentialGate:
    """Compares a request header against a server-held shared secret."""

    def __init__(self, expected: Optional[str], setting_name: str):
        self.expected = (expected or "").strip()
        self.setting_name = setting_name

    def check(self, provided: Optional[str]) -> None:
        """Raise unless ``provided`` exactly matches the configured secret."""
        if not self.expected:
            logger.error("%s is not configured; rejecting request", self.setting_name)
            raise MisconfigurationError(f"Server misconfigured: {self.setting_name} missing")

        got = (provided or "").strip()
        if not got:
            raise InvalidCredentialError("Missing API key")
        if not hmac.compare_digest(got.encode(), self.expected.encode()):
            logger.warning("Rejected request with invalid %s", self.setting_name)
            raise InvalidCredentialError("Invalid API key")
