# =======================================================================================
# doorcheck/api/routes/checkins.py - Check-in Reporting Endpoints
# =======================================================================================
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ...database import DatabaseManager
from ...models.schemas import CheckinsResponse, CheckinSummary
from ...services.dashboard_service import DashboardService
from ..dependencies import get_db, require_admin_key

router = APIRouter(dependencies=[Depends(require_admin_key)])
dashboard_service = DashboardService()


@router.get("/admin/checkins", response_model=CheckinsResponse)
def get_checkins(
    event_id: Optional[str] = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        checkins = dashboard_service.get_checkins(conn, event_id, limit)
    return CheckinsResponse(checkins=checkins)


@router.get("/admin/checkins/summary", response_model=CheckinSummary)
def get_summary(
    event_id: str = Query(...),
    db: DatabaseManager = Depends(get_db),
):
    with db.get_connection() as conn:
        summary = dashboard_service.get_summary(conn, event_id)
    return CheckinSummary(**summary)
