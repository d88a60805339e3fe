# =======================================================================================
# doorcheck/api/routes/doorcheck.py - Door Device Endpoints
# =======================================================================================
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from ...database import DatabaseManager
from ...models.schemas import DoorcheckResponse, DoorcheckRequest, DoorEventsResponse, MemberOut, OkResponse
from ...services.doorcheck_service import DoorcheckService
from ...services.event_resolver import EventResolver
from ..dependencies import get_db, get_doorcheck_service, require_door_key

router = APIRouter(dependencies=[Depends(require_door_key)])


@router.post("/doorcheck", response_model=DoorcheckResponse)
def doorcheck(
    request: DoorcheckRequest,
    db: DatabaseManager = Depends(get_db),
    service: DoorcheckService = Depends(get_doorcheck_service),
):
    """Decide admission for a scanned code. Denials are HTTP 200 with ``allowed: false``."""
    with db.get_connection() as conn:
        decision = service.process_scan(conn, request)

    response = DoorcheckResponse(
        allowed=decision.allowed,
        reason=decision.reason,
        method=decision.method,
        checkin_id=decision.checkin_id,
        member=MemberOut(**decision.member) if decision.member else None,
    )
    # optional top-level keys are omitted; member fields stay present even when null
    body = response.model_dump(mode="json")
    for key in ("checkin_id", "member"):
        if body[key] is None:
            del body[key]
    return JSONResponse(body)


@router.post("/doorcheck/ping", response_model=OkResponse)
def ping():
    """Lets a door device verify its configured key."""
    return OkResponse()


@router.get("/doorcheck/events", response_model=DoorEventsResponse)
def door_events(
    limit: int = Query(200, ge=1, le=500),
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        events = EventResolver.list_door_events(conn, limit)
    return DoorEventsResponse(events=events)
