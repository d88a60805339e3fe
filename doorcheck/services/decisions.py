# =======================================================================================
# doorcheck/services/decisions.py - Decision Types
# =======================================================================================
from dataclasses import dataclass
from typing import Any, Dict, Optional
from ..models.enums import CheckinReason, CheckinResult, ResolutionMethod


@dataclass(frozen=True)
class ScanContext:
    """One check-in attempt after the event has been resolved."""
    event_id: str
    code: str
    method: ResolutionMethod
    device_id: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    reason: CheckinReason
    method: ResolutionMethod
    checkin_id: str
    member_id: Optional[str] = None
    member: Optional[Dict[str, Any]] = None

    @property
    def allowed(self) -> bool:
        return self.reason.result is CheckinResult.ALLOWED
