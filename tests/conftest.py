from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from doorcheck.config import Config
from doorcheck.main import create_app
from doorcheck.models import tables
from doorcheck.services.doorcheck_service import DoorcheckService

DOOR_KEY = "door-secret"
ADMIN_KEY = "admin-secret"
TODAY = date(2026, 10, 18)

EVENT_ID = "evt-1"
OTHER_EVENT_ID = "evt-2"
EVENT_REF = "XC-100"

LEGACY_BARCODE = "40111111"
NO_MEMBERSHIP_BARCODE = "40999999"
LEGACY_CARD = "a1b2c3d4"
ACTIVE_CARD = "activecard01"
ENDS_TODAY_CARD = "todaycard01"
EXPIRED_CARD = "expiredcard1"
PENDING_CARD = "pendingcard1"
REVOKED_CARD = "revokedcard1"
ORPHAN_CARD = "orphancard01"


def _member(member_id, first, last, legacy=False, barcode=None):
    return {
        "id": member_id,
        "first_name": first,
        "last_name": last,
        "email": f"{member_id}@example.org",
        "phone": None,
        "legacy_barcode": barcode,
        "legacy": legacy,
    }


def _card(card_id, member_id, secret, revoked=False):
    return {"id": card_id, "member_id": member_id, "qr_secret": secret, "revoked": revoked}


def _membership(membership_id, member_id, status="active", end_date=None):
    return {
        "id": membership_id,
        "member_id": member_id,
        "status": status,
        "start_date": TODAY - timedelta(days=365),
        "end_date": end_date,
    }


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    tables.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(engine):
    with engine.begin() as conn:
        conn.execute(tables.events.insert(), [
            {"id": EVENT_ID, "name": "Opening Night", "event_ref": EVENT_REF, "city": "Milano", "venue": "Magazzini"},
            {"id": OTHER_EVENT_ID, "name": "Closing Party", "event_ref": None, "city": "Torino", "venue": None},
        ])
        conn.execute(tables.members.insert(), [
            _member("m-legacy", "Lia", "Vecchi", legacy=True, barcode=LEGACY_BARCODE),
            _member("m-active", "Ada", "Attiva"),
            _member("m-today", "Tina", "Oggi"),
            _member("m-expired", "Enzo", "Scaduto"),
            _member("m-pending", "Pia", "Attesa"),
            _member("m-revoked", "Rino", "Revocato", legacy=True),
            _member("m-none", "Nino", "Nessuno", barcode=NO_MEMBERSHIP_BARCODE),
        ])
        conn.execute(tables.member_cards.insert(), [
            _card("c-legacy", "m-legacy", LEGACY_CARD),
            _card("c-active", "m-active", ACTIVE_CARD),
            _card("c-today", "m-today", ENDS_TODAY_CARD),
            _card("c-expired", "m-expired", EXPIRED_CARD),
            _card("c-pending", "m-pending", PENDING_CARD),
            _card("c-revoked", "m-revoked", REVOKED_CARD, revoked=True),
            _card("c-orphan", "m-ghost", ORPHAN_CARD),
        ])
        conn.execute(tables.memberships.insert(), [
            _membership("ms-active", "m-active", end_date=None),
            _membership("ms-today", "m-today", end_date=TODAY),
            _membership("ms-expired", "m-expired", end_date=TODAY - timedelta(days=1)),
            _membership("ms-pending", "m-pending", status="pending", end_date=None),
        ])
    return engine


@pytest.fixture
def config():
    return Config(DB_URL="sqlite://", DOOR_API_KEY=DOOR_KEY, ADMIN_API_KEY=ADMIN_KEY)


@pytest.fixture
def app(config, seed):
    app = create_app(config, engine=seed)
    app.state.doorcheck_service = DoorcheckService(clock=lambda: TODAY)
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def door_headers():
    return {"X-API-Key": DOOR_KEY}


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


@pytest.fixture
def count_checkins(engine):
    def _count(**filters):
        stmt = select(func.count()).select_from(tables.checkins)
        for column, value in filters.items():
            stmt = stmt.where(tables.checkins.c[column] == value)
        with engine.connect() as conn:
            return conn.execute(stmt).scalar_one()
    return _count
