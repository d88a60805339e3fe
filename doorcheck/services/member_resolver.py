# =======================================================================================
# doorcheck/services/member_resolver.py - Member Lookup
# =======================================================================================
from typing import Any, Dict, Optional, Union
from sqlalchemy import text
from sqlalchemy.engine import Connection
from ..models.enums import CheckinReason, ResolutionMethod
from .audit_logger import AuditLogger
from .decisions import Decision, ScanContext

_MEMBER_COLUMNS = "id, first_name, last_name, email, legacy"


class MemberResolver:
    """Looks a scanned code up in the namespace picked by the classifier."""

    def __init__(self, audit: AuditLogger):
        self.audit = audit

    @staticmethod
    def _member_row(row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "first_name": row["first_name"],
            "last_name": row["last_name"],
            "email": row["email"],
            "legacy": bool(row["legacy"]),
        }

    def get_member(self, conn: Connection, member_id: str) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            text(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE id = :mid"),
            {"mid": member_id},
        ).mappings().first()
        return self._member_row(row) if row else None

    def _deny(self, conn: Connection, ctx: ScanContext, member_id: Optional[str], reason: CheckinReason) -> Decision:
        checkin_id = self.audit.record(conn, ctx, member_id, reason)
        return Decision(reason=reason, method=ctx.method, checkin_id=checkin_id, member_id=member_id)

    def resolve(self, conn: Connection, ctx: ScanContext) -> Union[Dict[str, Any], Decision]:
        """
        Return the member row, or a denial Decision whose audit row has
        already been written.
        """
        if ctx.method is ResolutionMethod.WALLY_BARCODE:
            row = conn.execute(
                text(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE legacy_barcode = :code LIMIT 1"),
                {"code": ctx.code},
            ).mappings().first()
            if not row:
                return self._deny(conn, ctx, None, CheckinReason.INVALID_BARCODE)
            return self._member_row(row)

        card = conn.execute(
            text("SELECT member_id, revoked FROM member_cards WHERE qr_secret = :code LIMIT 1"),
            {"code": ctx.code},
        ).mappings().first()
        if not card:
            return self._deny(conn, ctx, None, CheckinReason.INVALID_QR)
        if card["revoked"]:
            return self._deny(conn, ctx, card["member_id"], CheckinReason.CARD_REVOKED)

        member = self.get_member(conn, card["member_id"])
        if member is None:
            # card points at a member row that no longer exists
            return self._deny(conn, ctx, None, CheckinReason.MEMBER_NOT_FOUND)
        return member
