# =======================================================================================
# doorcheck/models/schemas.py - Pydantic Models
# =======================================================================================
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from .enums import CheckinReason, CheckinResult, MembershipStatus, ResolutionMethod

# ========== Door check-in ==========
class DoorcheckRequest(BaseModel):
    """Scan submitted by a door device."""
    event_id: Optional[str] = Field(None, description="Internal event id")
    event_ref: Optional[str] = Field(None, description="External event reference code")
    qr: Optional[str] = Field(None, max_length=255, description="Scanned barcode or QR secret")
    device_id: Optional[str] = Field(None, max_length=120, description="Door device identifier")


class MemberOut(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    legacy: bool = False


class DoorcheckResponse(BaseModel):
    ok: bool = True
    allowed: bool
    reason: CheckinReason
    method: ResolutionMethod
    checkin_id: Optional[str] = None
    member: Optional[MemberOut] = None


class OkResponse(BaseModel):
    ok: bool = True


# ========== Door events ==========
class DoorEvent(BaseModel):
    id: str
    name: str = ""
    starts_at: Optional[datetime] = None
    city: str = ""
    venue: str = ""
    event_ref: Optional[str] = None


class DoorEventsResponse(BaseModel):
    ok: bool = True
    events: List[DoorEvent]


# ========== Health ==========
class HealthResponse(BaseModel):
    status: str                 # "ok" | "error"
    database: bool
    message: Optional[str] = None


# ========== Check-in reporting ==========
class CheckinMember(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class CheckinItem(BaseModel):
    id: str
    event_id: str
    member_id: Optional[str] = None
    result: CheckinResult
    reason: CheckinReason
    method: ResolutionMethod
    scanned_code: Optional[str] = None
    device_id: Optional[str] = None
    created_at: Optional[datetime] = None
    member: Optional[CheckinMember] = None


class CheckinsResponse(BaseModel):
    ok: bool = True
    checkins: List[CheckinItem]


class CheckinSummary(BaseModel):
    ok: bool = True
    event_id: str
    attempts: int
    allowed: int
    denied: int
    by_reason: Dict[str, int]


# ========== Member administration ==========
class SimpleMember(BaseModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    legacy_barcode: Optional[str] = None
    legacy: bool = False


class MemberSearchResponse(BaseModel):
    ok: bool = True
    members: List[SimpleMember]


class MemberImportResponse(BaseModel):
    ok: bool = True
    inserted: int
    updated: int
    skipped: int


class IssueCardRequest(BaseModel):
    qr_secret: Optional[str] = Field(None, min_length=8, max_length=128, description="Explicit secret; generated when omitted")
    revoke_previous: bool = Field(True, description="Revoke the member's other active cards")


class CardOut(BaseModel):
    id: str
    member_id: str
    qr_secret: str
    revoked: bool
    revoked_at: Optional[datetime] = None


class CardResponse(BaseModel):
    ok: bool = True
    card: CardOut


class CreateMembershipRequest(BaseModel):
    status: MembershipStatus = MembershipStatus.ACTIVE
    start_date: date
    end_date: Optional[date] = None


class MembershipOut(BaseModel):
    id: str
    member_id: str
    status: MembershipStatus
    start_date: date
    end_date: Optional[date] = None


class MembershipResponse(BaseModel):
    ok: bool = True
    membership: MembershipOut
