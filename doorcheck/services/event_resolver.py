# =======================================================================================
# doorcheck/services/event_resolver.py - Event Lookup
# =======================================================================================
from typing import Any, Dict, List, Optional
from sqlalchemy import text
from sqlalchemy.engine import Connection
from ..utils.exceptions import BadRequestError, EventNotFoundError
from ..utils.validators import as_datetime, clean


class EventResolver:
    """Resolves the event a scan is made for."""

    @staticmethod
    def resolve(conn: Connection, event_id: Optional[str], event_ref: Optional[str]) -> str:
        """
        Return the internal id of the target event.

        ``event_id`` wins when present; otherwise the event is looked up by its
        external reference code.
        """
        eid = clean(event_id)
        if eid:
            row = conn.execute(
                text("SELECT id FROM events WHERE id = :eid"),
                {"eid": eid},
            ).mappings().first()
            if not row:
                raise EventNotFoundError()
            return row["id"]

        ref = clean(event_ref)
        if not ref:
            raise BadRequestError("Missing event_id or event_ref")

        row = conn.execute(
            text("SELECT id FROM events WHERE event_ref = :ref"),
            {"ref": ref},
        ).mappings().first()
        if not row:
            raise EventNotFoundError()
        return row["id"]

    @staticmethod
    def list_door_events(conn: Connection, limit: int = 200) -> List[Dict[str, Any]]:
        """Minimal event fields for the door device's event picker."""
        rows = conn.execute(
            text(
                """
                SELECT id, name, starts_at, city, venue, event_ref
                FROM events
                ORDER BY CASE WHEN starts_at IS NULL THEN 1 ELSE 0 END, starts_at DESC, name
                LIMIT :limit
                """
            ),
            {"limit": limit},
        ).mappings().all()

        return [
            {
                "id": r["id"],
                "name": r["name"] or "",
                "starts_at": as_datetime(r["starts_at"]),
                "city": r["city"] or "",
                "venue": r["venue"] or "",
                "event_ref": r["event_ref"],
            }
            for r in rows
        ]
