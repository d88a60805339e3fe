# =======================================================================================
# doorcheck/services/admission_policy.py - Admission Rules
# =======================================================================================
from datetime import date
from typing import Any, Dict
from sqlalchemy import Date, bindparam, text
from sqlalchemy.engine import Connection
from ..models.enums import CheckinReason, MembershipStatus
from .audit_logger import AuditLogger
from .decisions import Decision, ScanContext

_ACTIVE_MEMBERSHIP = text("""
    SELECT id FROM memberships
    WHERE member_id = :mid
      AND status = :status
      AND (end_date IS NULL OR end_date >= :today)
    LIMIT 1
""").bindparams(bindparam("today", type_=Date))


class AdmissionPolicy:
    """
    Decides admission for a resolved member:

    1. an earlier allowed check-in for the same event denies (already_checked_in)
    2. legacy members are admitted without further checks (legacy_ok)
    3. otherwise an active membership covering ``today`` is required
    """

    def __init__(self, audit: AuditLogger):
        self.audit = audit

    @staticmethod
    def has_active_membership(conn: Connection, member_id: str, today: date) -> bool:
        row = conn.execute(
            _ACTIVE_MEMBERSHIP,
            {"mid": member_id, "status": MembershipStatus.ACTIVE.value, "today": today},
        ).first()
        return row is not None

    def _deny(self, conn: Connection, ctx: ScanContext, member: Dict[str, Any], reason: CheckinReason) -> Decision:
        checkin_id = self.audit.record(conn, ctx, member["id"], reason)
        return Decision(reason=reason, method=ctx.method, checkin_id=checkin_id,
                        member_id=member["id"], member=member)

    def _admit(self, conn: Connection, ctx: ScanContext, member: Dict[str, Any], reason: CheckinReason) -> Decision:
        checkin_id = self.audit.record_admission(conn, ctx, member["id"], reason)
        if checkin_id is None:
            # lost the race against a concurrent scan of the same member
            return self._deny(conn, ctx, member, CheckinReason.ALREADY_CHECKED_IN)
        return Decision(reason=reason, method=ctx.method, checkin_id=checkin_id,
                        member_id=member["id"], member=member)

    def decide(self, conn: Connection, ctx: ScanContext, member: Dict[str, Any], today: date) -> Decision:
        if self.audit.has_allowed_checkin(conn, ctx.event_id, member["id"]):
            return self._deny(conn, ctx, member, CheckinReason.ALREADY_CHECKED_IN)

        if member["legacy"]:
            return self._admit(conn, ctx, member, CheckinReason.LEGACY_OK)

        if self.has_active_membership(conn, member["id"], today):
            return self._admit(conn, ctx, member, CheckinReason.MEMBERSHIP_ACTIVE)

        return self._deny(conn, ctx, member, CheckinReason.NOT_MEMBER_ACTIVE)
