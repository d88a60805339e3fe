# =======================================================================================
# doorcheck/models/enums.py - Enums and Constants
# =======================================================================================
from enum import Enum


class ResolutionMethod(str, Enum):
    """Identity namespace a scanned code was resolved in."""
    LV_QR = "lv_qr"
    WALLY_BARCODE = "wally_barcode"


class CheckinResult(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


class CheckinReason(str, Enum):
    """Reason codes recorded on every check-in decision."""
    INVALID_BARCODE = "invalid_barcode"
    INVALID_QR = "invalid_qr"
    CARD_REVOKED = "card_revoked"
    MEMBER_NOT_FOUND = "member_not_found"
    ALREADY_CHECKED_IN = "already_checked_in"
    LEGACY_OK = "legacy_ok"
    MEMBERSHIP_ACTIVE = "membership_active"
    NOT_MEMBER_ACTIVE = "not_member_active"

    @property
    def result(self) -> CheckinResult:
        if self in (CheckinReason.LEGACY_OK, CheckinReason.MEMBERSHIP_ACTIVE):
            return CheckinResult.ALLOWED
        return CheckinResult.DENIED


class MembershipStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    EXPIRED = "expired"
