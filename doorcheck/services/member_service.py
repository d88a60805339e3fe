# =======================================================================================
# doorcheck/services/member_service.py - Member Administration Service
# =======================================================================================
import csv
import io
import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List
from sqlalchemy import Date, DateTime, bindparam, text
from sqlalchemy.engine import Connection
from ..models.schemas import CreateMembershipRequest, IssueCardRequest
from ..utils.exceptions import BadRequestError, NotFoundError
from ..utils.validators import as_datetime, clean, is_digits_only, normalize_email, normalize_phone, parse_bool

logger = logging.getLogger(__name__)

_REVOKE_CARDS = text("""
    UPDATE member_cards
    SET revoked = :revoked, revoked_at = :now
    WHERE member_id = :mid AND revoked = :not_revoked
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))

_REVOKE_CARD = text("""
    UPDATE member_cards
    SET revoked = :revoked, revoked_at = :now
    WHERE id = :cid
""").bindparams(bindparam("now", type_=DateTime(timezone=True)))

_INSERT_MEMBERSHIP = text("""
    INSERT INTO memberships (id, member_id, status, start_date, end_date)
    VALUES (:id, :mid, :status, :start_date, :end_date)
""").bindparams(
    bindparam("start_date", type_=Date),
    bindparam("end_date", type_=Date),
)


class MemberService:
    """Handles member, card and membership administration."""

    # ----------------- helpers -----------------
    @staticmethod
    def _require_member(conn: Connection, member_id: str) -> None:
        row = conn.execute(
            text("SELECT id FROM members WHERE id = :mid"), {"mid": member_id}
        ).first()
        if not row:
            raise NotFoundError("Member not found")

    @staticmethod
    def _card_row(row) -> Dict[str, Any]:
        return {
            "id": row["id"],
            "member_id": row["member_id"],
            "qr_secret": row["qr_secret"],
            "revoked": bool(row["revoked"]),
            "revoked_at": as_datetime(row["revoked_at"]),
        }

    @staticmethod
    def generate_secret() -> str:
        # 32 bytes -> 64 hex chars
        return secrets.token_hex(32)

    # ----------------- import -----------------
    def import_members_from_csv(self, conn: Connection, data: bytes) -> Dict[str, int]:
        """
        Import legacy members from CSV.
        Headers: barcode,first_name,last_name,email,phone,legacy
        Rows are upserted on the legacy barcode; rows without a numeric barcode
        are skipped. Blank cells leave the stored values untouched.
        """
        try:
            reader = csv.DictReader(io.StringIO(data.decode("utf-8-sig")))
        except UnicodeDecodeError:
            raise BadRequestError("Invalid CSV encoding")

        inserted = 0
        updated = 0
        skipped = 0

        for row in reader:
            barcode = clean(row.get("barcode") or row.get("legacy_barcode"))
            if not barcode:
                skipped += 1
                continue
            if not is_digits_only(barcode):
                # only digits-only codes are looked up as legacy barcodes at the door
                logger.warning("Member import: skipping non-numeric barcode %r", barcode)
                skipped += 1
                continue

            # a blank legacy cell keeps the stored flag
            legacy_cell = clean(row.get("legacy"))

            params = {
                "barcode": barcode,
                "first": clean(row.get("first_name")),
                "last": clean(row.get("last_name")),
                "email": normalize_email(row.get("email")),
                "phone": normalize_phone(row.get("phone")),
                "legacy": parse_bool(legacy_cell) if legacy_cell else None,
            }

            existing = conn.execute(
                text("SELECT id FROM members WHERE legacy_barcode = :barcode"),
                {"barcode": barcode},
            ).mappings().first()

            if existing:
                conn.execute(
                    text("""
                        UPDATE members
                        SET first_name = COALESCE(:first, first_name),
                            last_name = COALESCE(:last, last_name),
                            email = COALESCE(:email, email),
                            phone = COALESCE(:phone, phone),
                            legacy = COALESCE(:legacy, legacy)
                        WHERE id = :id
                    """),
                    {**params, "id": existing["id"]},
                )
                updated += 1
            else:
                conn.execute(
                    text("""
                        INSERT INTO members (id, first_name, last_name, email, phone, legacy_barcode, legacy)
                        VALUES (:id, :first, :last, :email, :phone, :barcode, :legacy)
                    """),
                    {**params, "legacy": bool(params["legacy"]), "id": str(uuid.uuid4())},
                )
                inserted += 1

        logger.info("Member import: inserted=%d updated=%d skipped=%d", inserted, updated, skipped)
        return {"inserted": inserted, "updated": updated, "skipped": skipped}

    # ----------------- search -----------------
    def search_members(self, conn: Connection, query: str) -> List[Dict[str, Any]]:
        """
        Exact match on email, legacy barcode or card secret first,
        then a substring match on name and email.
        """
        q = query.strip()
        if not q:
            return []

        rows = conn.execute(
            text(
                """
                SELECT id, first_name, last_name, email, legacy_barcode, legacy
                FROM members
                WHERE lower(email) = :lq
                   OR legacy_barcode = :q
                   OR id IN (SELECT member_id FROM member_cards WHERE qr_secret = :q)
                ORDER BY last_name, first_name
                LIMIT 10
                """
            ),
            {"q": q, "lq": q.lower()},
        ).mappings().all()

        if not rows:
            like = f"%{q.lower()}%"
            rows = conn.execute(
                text(
                    """
                    SELECT id, first_name, last_name, email, legacy_barcode, legacy
                    FROM members
                    WHERE lower(first_name) LIKE :like
                       OR lower(last_name) LIKE :like
                       OR lower(email) LIKE :like
                    ORDER BY last_name, first_name
                    LIMIT 10
                    """
                ),
                {"like": like},
            ).mappings().all()

        return [
            {
                "id": r["id"],
                "first_name": r["first_name"],
                "last_name": r["last_name"],
                "email": r["email"],
                "legacy_barcode": r["legacy_barcode"],
                "legacy": bool(r["legacy"]),
            }
            for r in rows
        ]

    # ----------------- cards -----------------
    def issue_card(self, conn: Connection, member_id: str, req: IssueCardRequest) -> Dict[str, Any]:
        self._require_member(conn, member_id)

        secret = clean(req.qr_secret) or self.generate_secret()
        if is_digits_only(secret):
            # numeric codes are looked up as legacy barcodes, never as cards
            raise BadRequestError("qr_secret must not be purely numeric")
        taken = conn.execute(
            text("SELECT id FROM member_cards WHERE qr_secret = :s"), {"s": secret}
        ).first()
        if taken:
            raise BadRequestError("qr_secret already in use")

        if req.revoke_previous:
            conn.execute(
                _REVOKE_CARDS,
                {"revoked": True, "not_revoked": False, "now": datetime.now(timezone.utc), "mid": member_id},
            )

        card_id = str(uuid.uuid4())
        conn.execute(
            text("""
                INSERT INTO member_cards (id, member_id, qr_secret, revoked)
                VALUES (:id, :mid, :secret, :revoked)
            """),
            {"id": card_id, "mid": member_id, "secret": secret, "revoked": False},
        )
        logger.info("Issued card %s for member %s", card_id, member_id)
        return {"id": card_id, "member_id": member_id, "qr_secret": secret, "revoked": False, "revoked_at": None}

    def revoke_card(self, conn: Connection, card_id: str) -> Dict[str, Any]:
        card = conn.execute(
            text("SELECT id, member_id, qr_secret, revoked, revoked_at FROM member_cards WHERE id = :cid"),
            {"cid": card_id},
        ).mappings().first()
        if not card:
            raise NotFoundError("Card not found")
        if card["revoked"]:
            return self._card_row(card)

        now = datetime.now(timezone.utc)
        conn.execute(_REVOKE_CARD, {"revoked": True, "now": now, "cid": card_id})
        logger.info("Revoked card %s of member %s", card_id, card["member_id"])
        return {**self._card_row(card), "revoked": True, "revoked_at": now}

    # ----------------- memberships -----------------
    def create_membership(
        self, conn: Connection, member_id: str, req: CreateMembershipRequest
    ) -> Dict[str, Any]:
        if req.end_date is not None and req.end_date < req.start_date:
            raise BadRequestError("end_date before start_date")
        self._require_member(conn, member_id)

        membership_id = str(uuid.uuid4())
        conn.execute(
            _INSERT_MEMBERSHIP,
            {
                "id": membership_id,
                "mid": member_id,
                "status": req.status.value,
                "start_date": req.start_date,
                "end_date": req.end_date,
            },
        )
        return {
            "id": membership_id,
            "member_id": member_id,
            "status": req.status,
            "start_date": req.start_date,
            "end_date": req.end_date,
        }

