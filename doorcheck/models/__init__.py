# =======================================================================================
# doorcheck/models/__init__.py - Models Package
# =======================================================================================
from .schemas import *
from .enums import *

__all__ = [
    "DoorcheckRequest", "DoorcheckResponse", "MemberOut", "OkResponse",
    "DoorEvent", "DoorEventsResponse", "HealthResponse", "CheckinItem", "CheckinsResponse",
    "CheckinSummary", "SimpleMember", "MemberSearchResponse", "MemberImportResponse",
    "IssueCardRequest", "CardResponse", "CreateMembershipRequest", "MembershipResponse",
    "ResolutionMethod", "CheckinResult", "CheckinReason", "MembershipStatus",
]
