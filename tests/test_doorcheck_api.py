import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from conftest import (
    ACTIVE_CARD,
    ENDS_TODAY_CARD,
    EVENT_ID,
    EVENT_REF,
    EXPIRED_CARD,
    LEGACY_BARCODE,
    LEGACY_CARD,
    NO_MEMBERSHIP_BARCODE,
    ORPHAN_CARD,
    OTHER_EVENT_ID,
    PENDING_CARD,
    REVOKED_CARD,
)


@pytest.fixture
def scan(client, door_headers):
    def _scan(qr, event_id=EVENT_ID, **extra):
        body = {"event_id": event_id, "qr": qr, **extra}
        return client.post("/api/doorcheck", json=body, headers=door_headers)
    return _scan


class TestDoorcheckScenarios:

    def test_unknown_numeric_code_is_invalid_barcode(self, scan, count_checkins):
        res = scan("40123456")

        assert res.status_code == 200
        body = res.json()
        assert body["ok"] is True
        assert body["allowed"] is False
        assert body["reason"] == "invalid_barcode"
        assert body["method"] == "wally_barcode"
        assert "member" not in body
        assert count_checkins(reason="invalid_barcode", member_id=None) == 1

    def test_legacy_member_card_is_admitted(self, scan):
        body = scan(LEGACY_CARD).json()

        assert body["allowed"] is True
        assert body["reason"] == "legacy_ok"
        assert body["method"] == "lv_qr"
        assert body["member"] == {
            "id": "m-legacy",
            "first_name": "Lia",
            "last_name": "Vecchi",
            "email": "m-legacy@example.org",
            "legacy": True,
        }
        assert body["checkin_id"]

    def test_second_scan_is_already_checked_in(self, scan, count_checkins):
        assert scan(LEGACY_CARD).json()["allowed"] is True

        body = scan(LEGACY_CARD).json()

        assert body["allowed"] is False
        assert body["reason"] == "already_checked_in"
        assert count_checkins(member_id="m-legacy", result="allowed") == 1
        assert count_checkins(member_id="m-legacy") == 2

    def test_revoked_card_is_denied(self, scan, count_checkins):
        body = scan(REVOKED_CARD).json()

        assert body["allowed"] is False
        assert body["reason"] == "card_revoked"
        assert body["method"] == "lv_qr"
        # the audit row still references the card owner
        assert count_checkins(reason="card_revoked", member_id="m-revoked") == 1

    def test_open_ended_active_membership_is_admitted(self, scan):
        body = scan(ACTIVE_CARD).json()

        assert body["allowed"] is True
        assert body["reason"] == "membership_active"
        assert body["member"]["legacy"] is False

    def test_membership_ended_yesterday_is_denied(self, scan):
        body = scan(EXPIRED_CARD).json()

        assert body["allowed"] is False
        assert body["reason"] == "not_member_active"
        assert body["member"]["id"] == "m-expired"


class TestDoorcheckRules:

    def test_membership_ending_today_still_admits(self, scan):
        assert scan(ENDS_TODAY_CARD).json()["reason"] == "membership_active"

    def test_pending_membership_is_not_active(self, scan):
        assert scan(PENDING_CARD).json()["reason"] == "not_member_active"

    def test_member_without_memberships_is_denied(self, scan):
        body = scan(NO_MEMBERSHIP_BARCODE).json()

        assert body["reason"] == "not_member_active"
        assert body["method"] == "wally_barcode"

    def test_unknown_secret_is_invalid_qr(self, scan, count_checkins):
        body = scan("zz-unknown-secret").json()

        assert body["allowed"] is False
        assert body["reason"] == "invalid_qr"
        assert count_checkins(reason="invalid_qr", member_id=None) == 1

    def test_card_of_missing_member_is_member_not_found(self, scan):
        body = scan(ORPHAN_CARD).json()

        assert body["allowed"] is False
        assert body["reason"] == "member_not_found"
        assert "member" not in body

    def test_revoked_card_never_becomes_allowed(self, scan):
        reasons = [scan(REVOKED_CARD).json()["reason"] for _ in range(2)]
        assert reasons == ["card_revoked", "card_revoked"]

    def test_admission_is_per_member_across_namespaces(self, scan):
        assert scan(LEGACY_BARCODE).json()["reason"] == "legacy_ok"
        assert scan(LEGACY_CARD).json()["reason"] == "already_checked_in"

    def test_admission_is_per_event(self, scan):
        assert scan(LEGACY_CARD).json()["allowed"] is True
        assert scan(LEGACY_CARD, event_id=OTHER_EVENT_ID).json()["allowed"] is True

    def test_earlier_denial_does_not_block_admission(self, scan, client, admin_headers):
        assert scan(NO_MEMBERSHIP_BARCODE).json()["reason"] == "not_member_active"

        res = client.post(
            "/api/admin/members/m-none/memberships",
            json={"status": "active", "start_date": "2026-01-01"},
            headers=admin_headers,
        )
        assert res.status_code == 200

        assert scan(NO_MEMBERSHIP_BARCODE).json()["reason"] == "membership_active"

    def test_every_attempt_writes_one_checkin(self, scan, count_checkins):
        codes = [LEGACY_CARD, LEGACY_CARD, REVOKED_CARD, "40123456", "nope-secret", ORPHAN_CARD, EXPIRED_CARD]
        for code in codes:
            assert scan(code).status_code == 200

        assert count_checkins() == len(codes)

    def test_code_is_trimmed_and_device_is_recorded(self, scan, count_checkins):
        body = scan(f"  {ACTIVE_CARD} \n", device_id="door-1").json()

        assert body["reason"] == "membership_active"
        assert count_checkins(scanned_code=ACTIVE_CARD, device_id="door-1") == 1


class TestDoorcheckRequestErrors:

    def test_event_resolved_by_reference(self, client, door_headers):
        res = client.post(
            "/api/doorcheck",
            json={"event_ref": EVENT_REF, "qr": LEGACY_CARD},
            headers=door_headers,
        )
        assert res.status_code == 200
        assert res.json()["allowed"] is True

    def test_event_id_takes_precedence_over_reference(self, client, door_headers):
        res = client.post(
            "/api/doorcheck",
            json={"event_id": "evt-missing", "event_ref": EVENT_REF, "qr": LEGACY_CARD},
            headers=door_headers,
        )
        assert res.status_code == 404

    def test_missing_event_is_bad_request(self, client, door_headers, count_checkins):
        res = client.post("/api/doorcheck", json={"qr": LEGACY_CARD}, headers=door_headers)

        assert res.status_code == 400
        assert res.json() == {"ok": False, "error": "Missing event_id or event_ref"}
        assert count_checkins() == 0

    def test_unknown_event_is_not_found(self, scan, count_checkins):
        res = scan(LEGACY_CARD, event_id="evt-missing")

        assert res.status_code == 404
        assert res.json() == {"ok": False, "error": "Event not found"}
        assert count_checkins() == 0

    def test_unknown_event_reference_is_not_found(self, client, door_headers):
        res = client.post(
            "/api/doorcheck",
            json={"event_ref": "XC-404", "qr": LEGACY_CARD},
            headers=door_headers,
        )
        assert res.status_code == 404

    def test_missing_qr_is_bad_request(self, scan, count_checkins):
        res = scan("   ")

        assert res.status_code == 400
        assert res.json() == {"ok": False, "error": "Missing qr"}
        assert count_checkins() == 0

    def test_non_json_body_is_bad_request(self, client, door_headers):
        res = client.post(
            "/api/doorcheck",
            content=b"not json",
            headers={**door_headers, "Content-Type": "application/json"},
        )
        assert res.status_code == 400
        assert res.json()["ok"] is False

    def test_missing_api_key_is_unauthorized(self, client, count_checkins):
        res = client.post("/api/doorcheck", json={"event_id": EVENT_ID, "qr": LEGACY_CARD})

        assert res.status_code == 401
        assert res.json() == {"ok": False, "error": "Missing API key"}
        assert count_checkins() == 0

    def test_wrong_api_key_is_unauthorized(self, client, count_checkins):
        res = client.post(
            "/api/doorcheck",
            json={"event_id": EVENT_ID, "qr": LEGACY_CARD},
            headers={"X-API-Key": "guess"},
        )

        assert res.status_code == 401
        assert res.json() == {"ok": False, "error": "Invalid API key"}
        assert count_checkins() == 0

    def test_missing_server_key_is_misconfiguration(self, app, client, door_headers):
        app.state.config.DOOR_API_KEY = None

        res = client.post(
            "/api/doorcheck",
            json={"event_id": EVENT_ID, "qr": LEGACY_CARD},
            headers=door_headers,
        )

        assert res.status_code == 500
        assert res.json() == {"ok": False, "error": "Server misconfigured: DOOR_API_KEY missing"}

    def test_audit_failure_is_server_error(self, app, scan, count_checkins, monkeypatch):
        def broken_insert(*args, **kwargs):
            raise OperationalError("INSERT INTO checkins", {}, Exception("store unavailable"))

        monkeypatch.setattr(app.state.doorcheck_service.audit, "record", broken_insert)

        res = scan("40123456")

        assert res.status_code == 500
        assert res.json() == {"ok": False, "error": "Database error"}
        assert count_checkins() == 0

    def test_failed_commit_is_server_error(self, engine, scan, count_checkins):
        def broken_commit(conn):
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        event.listen(engine, "commit", broken_commit)
        try:
            res = scan(LEGACY_CARD)
        finally:
            event.remove(engine, "commit", broken_commit)

        assert res.status_code == 500
        assert res.json() == {"ok": False, "error": "Database error"}
        assert count_checkins() == 0


class TestDoorcheckResponseShape:

    def test_denial_without_member_omits_member(self, scan):
        body = scan("40123456").json()

        assert "member" not in body
        assert body["checkin_id"]

    def test_member_fields_present_when_null(self, scan, client, admin_headers):
        client.post(
            "/api/admin/members/import",
            files={"file": ("m.csv", b"barcode,first_name,last_name,legacy\n50000003,Bea,Senzamail,true\n", "text/csv")},
            headers=admin_headers,
        )

        body = scan("50000003").json()

        assert body["reason"] == "legacy_ok"
        assert body["member"]["email"] is None
        assert set(body["member"]) == {"id", "first_name", "last_name", "email", "legacy"}
