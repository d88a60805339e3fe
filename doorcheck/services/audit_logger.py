# =======================================================================================
# doorcheck/services/audit_logger.py - Check-in Audit Trail
# =======================================================================================
import logging
import uuid
from typing import Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection
from ..models.enums import CheckinReason, CheckinResult
from .decisions import ScanContext

logger = logging.getLogger(__name__)


class AuditLogger:
    """Append-only writer for the ``checkins`` table."""

    @staticmethod
    def record(conn: Connection, ctx: ScanContext, member_id: Optional[str], reason: CheckinReason) -> str:
        """Insert one check-in row and return its id. Store errors propagate."""
        checkin_id = str(uuid.uuid4())
        conn.execute(
            text("""
                INSERT INTO checkins (id, event_id, member_id, result, reason, method, scanned_code, device_id)
                VALUES (:id, :eid, :mid, :result, :reason, :method, :code, :device)
            """),
            {
                "id": checkin_id, "eid": ctx.event_id, "mid": member_id,
                "result": reason.result.value, "reason": reason.value,
                "method": ctx.method.value, "code": ctx.code, "device": ctx.device_id,
            }
        )
        return checkin_id

    @staticmethod
    def record_admission(conn: Connection, ctx: ScanContext, member_id: str, reason: CheckinReason) -> Optional[str]:
        """
        Insert an allowed row guarded by the (event, member) partial unique index.
        Returns None when another allowed row already exists.
        """
        checkin_id = str(uuid.uuid4())
        res = conn.execute(
            text("""
                INSERT INTO checkins (id, event_id, member_id, result, reason, method, scanned_code, device_id)
                VALUES (:id, :eid, :mid, :result, :reason, :method, :code, :device)
                ON CONFLICT (event_id, member_id) WHERE result = 'allowed' DO NOTHING
            """),
            {
                "id": checkin_id, "eid": ctx.event_id, "mid": member_id,
                "result": CheckinResult.ALLOWED.value, "reason": reason.value,
                "method": ctx.method.value, "code": ctx.code, "device": ctx.device_id,
            }
        )
        if res.rowcount == 0:
            logger.warning("Concurrent admission detected for member %s at event %s", member_id, ctx.event_id)
            return None
        return checkin_id

    @staticmethod
    def has_allowed_checkin(conn: Connection, event_id: str, member_id: str) -> bool:
        row = conn.execute(
            text("""
                SELECT id FROM checkins
                WHERE event_id = :eid AND member_id = :mid AND result = :result
                LIMIT 1
            """),
            {"eid": event_id, "mid": member_id, "result": CheckinResult.ALLOWED.value}
        ).first()
        return row is not None
