# =======================================================================================
# doorcheck/services/doorcheck_service.py - Door Check-in Pipeline
# =======================================================================================
import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional
from sqlalchemy.engine import Connection
from ..models.schemas import DoorcheckRequest
from ..utils.exceptions import BadRequestError
from ..utils.validators import clean
from .admission_policy import AdmissionPolicy
from .audit_logger import AuditLogger
from .code_classifier import classify_code
from .decisions import Decision, ScanContext
from .event_resolver import EventResolver
from .member_resolver import MemberResolver

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class DoorcheckService:
    """Runs a scan through event resolution, member resolution and the admission policy."""

    def __init__(self, clock: Callable[[], date] = utc_today):
        self.clock = clock
        self.audit = AuditLogger()
        self.events = EventResolver()
        self.members = MemberResolver(self.audit)
        self.policy = AdmissionPolicy(self.audit)

    def process_scan(self, conn: Connection, request: DoorcheckRequest) -> Decision:
        """
        Process one door scan. Caller errors (missing fields, unknown event) raise
        before anything is written; every other outcome writes exactly one
        check-in row and is returned as a Decision.
        """
        event_id = self.events.resolve(conn, request.event_id, request.event_ref)

        code: Optional[str] = clean(request.qr)
        if not code:
            raise BadRequestError("Missing qr")

        ctx = ScanContext(
            event_id=event_id,
            code=code,
            method=classify_code(code),
            device_id=clean(request.device_id),
        )
        today = self.clock()

        resolved = self.members.resolve(conn, ctx)
        if isinstance(resolved, Decision):
            decision = resolved
        else:
            decision = self.policy.decide(conn, ctx, resolved, today)

        logger.info(
            "doorcheck event=%s method=%s device=%s member=%s result=%s reason=%s",
            event_id, ctx.method.value, ctx.device_id or "-", decision.member_id or "-",
            decision.reason.result.value, decision.reason.value,
        )
        return decision
