# =======================================================================================
# doorcheck/models/tables.py - Table Definitions
# =======================================================================================
"""
Schema of the check-in store.

Services talk to these tables with plain SQL; the definitions here exist so the
schema can be created (``DB_CREATE_TABLES``) and seeded in tests.
"""
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    MetaData,
    String,
    Table,
    func,
    text,
)

metadata = MetaData()

events = Table(
    "events",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False, server_default=""),
    Column("starts_at", DateTime(timezone=True), nullable=True),
    Column("city", String(120), nullable=True),
    Column("venue", String(255), nullable=True),
    Column("event_ref", String(120), nullable=True, unique=True),
)

members = Table(
    "members",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("first_name", String(120), nullable=True),
    Column("last_name", String(120), nullable=True),
    Column("email", String(255), nullable=True),
    Column("phone", String(40), nullable=True),
    Column("legacy_barcode", String(64), nullable=True, unique=True),
    Column("legacy", Boolean, nullable=False, server_default=text("false")),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

member_cards = Table(
    "member_cards",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("member_id", String(36), ForeignKey("members.id"), nullable=False, index=True),
    Column("qr_secret", String(128), nullable=False, unique=True),
    Column("revoked", Boolean, nullable=False, server_default=text("false")),
    Column("issued_at", DateTime(timezone=True), server_default=func.now()),
    Column("revoked_at", DateTime(timezone=True), nullable=True),
)

memberships = Table(
    "memberships",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("member_id", String(36), ForeignKey("members.id"), nullable=False, index=True),
    Column("status", String(16), nullable=False, server_default="pending"),
    Column("start_date", Date, nullable=False),
    Column("end_date", Date, nullable=True),
)

checkins = Table(
    "checkins",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("event_id", String(36), ForeignKey("events.id"), nullable=False, index=True),
    Column("member_id", String(36), ForeignKey("members.id"), nullable=True),
    Column("result", String(16), nullable=False),
    Column("reason", String(40), nullable=False),
    Column("method", String(20), nullable=False),
    Column("scanned_code", String(255), nullable=True),
    Column("device_id", String(120), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

# At most one allowed admission per (event, member); the admission insert relies on it.
Index(
    "uq_checkins_allowed_event_member",
    checkins.c.event_id,
    checkins.c.member_id,
    unique=True,
    postgresql_where=checkins.c.result == "allowed",
    sqlite_where=checkins.c.result == "allowed",
)
