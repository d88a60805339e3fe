# =======================================================================================
# doorcheck/services/dashboard_service.py
# =======================================================================================

from typing import Any, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..models.enums import CheckinReason, CheckinResult
from ..utils.exceptions import EventNotFoundError
from ..utils.validators import as_datetime


class DashboardService:
    """Read-only reporting over the check-in audit trail."""

    # ---------- summary ----------

    def get_summary(self, conn: Connection, event_id: str) -> Dict[str, Any]:
        event = conn.execute(
            text("SELECT id FROM events WHERE id = :eid"), {"eid": event_id}
        ).first()
        if not event:
            raise EventNotFoundError()

        rows = conn.execute(
            text(
                """
                SELECT result, reason, COUNT(*) AS n
                FROM checkins
                WHERE event_id = :eid
                GROUP BY result, reason
                """
            ),
            {"eid": event_id},
        ).mappings().all()

        by_reason = {reason.value: 0 for reason in CheckinReason}
        allowed = denied = 0
        for row in rows:
            n = int(row["n"] or 0)
            by_reason[row["reason"]] = by_reason.get(row["reason"], 0) + n
            if row["result"] == CheckinResult.ALLOWED.value:
                allowed += n
            else:
                denied += n

        return {
            "event_id": event_id,
            "attempts": allowed + denied,
            "allowed": allowed,
            "denied": denied,
            "by_reason": by_reason,
        }

    # ---------- logs ----------

    def get_checkins(
        self, conn: Connection, event_id: Optional[str] = None, limit: int = 200
    ) -> List[Dict[str, Any]]:
        where = ""
        params: Dict[str, Any] = {"limit": limit}
        if event_id:
            where = "WHERE c.event_id = :eid"
            params["eid"] = event_id

        rows = conn.execute(
            text(
                f"""
                SELECT
                    c.id            AS checkin_id,
                    c.event_id      AS event_id,
                    c.member_id     AS member_id,
                    c.result        AS result,
                    c.reason        AS reason,
                    c.method        AS method,
                    c.scanned_code  AS scanned_code,
                    c.device_id     AS device_id,
                    c.created_at    AS ts,
                    m.id            AS m_id,
                    m.first_name    AS m_first,
                    m.last_name     AS m_last,
                    m.email         AS m_email
                FROM checkins c
                LEFT JOIN members m ON c.member_id = m.id
                {where}
                ORDER BY c.created_at DESC, c.id DESC
                LIMIT :limit
                """
            ),
            params,
        ).mappings().all()

        checkins: List[Dict[str, Any]] = []

        for row in rows:
            member = None
            if row["m_id"] is not None:
                member = {
                    "id": row["m_id"],
                    "first_name": row["m_first"],
                    "last_name": row["m_last"],
                    "email": row["m_email"],
                }

            checkins.append(
                {
                    "id": row["checkin_id"],
                    "event_id": row["event_id"],
                    "member_id": row["member_id"],
                    "result": row["result"],
                    "reason": row["reason"],
                    "method": row["method"],
                    "scanned_code": row["scanned_code"],
                    "device_id": row["device_id"],
                    "created_at": as_datetime(row["ts"]),
                    "member": member,
                }
            )

        return checkins
