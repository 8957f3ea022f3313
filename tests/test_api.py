"""
HTTP surface: webhooks, admin gate, error bodies and the two end-to-end
scenarios (inbound from Vodia, outbound from GHL).

Run with: pytest tests/test_api.py -v
"""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from callbridge.main import create_app

SUBACCOUNT = {
    "name": "Acme Dental",
    "locationId": "loc1",
    "didNumber": "+1 555-000-1111",
    "ghlInboundUrl": "https://example/cb",
}


@pytest.fixture
def provisioned(client: TestClient, admin_headers):
    resp = client.post("/admin/subaccount", json=SUBACCOUNT, headers=admin_headers)
    assert resp.status_code == 200
    return resp


class TestHealth:

    def test_root_is_plain_text(self, client: TestClient):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.text == "Middleware running"
        assert resp.headers["content-type"].startswith("text/plain")

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"ok": True}

    def test_db_health(self, client: TestClient):
        assert client.get("/health/db").json()["ok"] is True


class TestAdminGate:

    @pytest.mark.parametrize("headers", [{}, {"x-admin-key": "wrong"}, {"x-admin-key": ""}])
    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("POST", "/admin/subaccount", SUBACCOUNT),
            ("POST", "/admin/subaccount", {}),
            ("POST", "/admin/subaccount", None),
            ("GET", "/admin/subaccounts", None),
            ("GET", "/admin/report", None),
        ],
    )
    def test_rejects_without_secret(self, client: TestClient, directory, headers, method, path, body):
        resp = client.request(method, path, json=body, headers=headers)
        assert resp.status_code == 403
        assert resp.json() == {"success": False, "error": "unauthorized", "message": "Unauthorized"}
        assert directory.list_all() == []

    def test_malformed_body_still_403(self, client: TestClient):
        resp = client.post(
            "/admin/subaccount",
            content=b"{not json",
            headers={"content-type": "application/json", "x-admin-key": "wrong"},
        )
        assert resp.status_code == 403

    def test_unconfigured_secret_locks_admin(self, test_settings, database, forwarder):
        app = create_app(settings=replace(test_settings, admin_secret=None), database=database, forwarder=forwarder)
        with TestClient(app) as c:
            assert c.get("/admin/subaccounts", headers={"x-admin-key": ""}).status_code == 403
            assert c.get("/admin/subaccounts").status_code == 403


class TestAdminSubaccounts:

    def test_upsert_and_list(self, client: TestClient, admin_headers, provisioned):
        assert provisioned.json() == {"success": True}

        rows = client.get("/admin/subaccounts", headers=admin_headers).json()
        assert len(rows) == 1
        assert rows[0]["locationId"] == "loc1"
        assert rows[0]["didNumber"] == "15550001111"
        assert rows[0]["ghlInboundUrl"] == "https://example/cb"
        assert rows[0]["name"] == "Acme Dental"

    def test_repeat_upsert_keeps_one_record(self, client: TestClient, admin_headers, provisioned):
        client.post(
            "/admin/subaccount",
            json={**SUBACCOUNT, "ghlInboundUrl": "https://example/cb2"},
            headers=admin_headers,
        )
        rows = client.get("/admin/subaccounts", headers=admin_headers).json()
        assert [r["ghlInboundUrl"] for r in rows] == ["https://example/cb2"]

    @pytest.mark.parametrize("missing", ["locationId", "didNumber", "ghlInboundUrl"])
    def test_missing_fields(self, client: TestClient, admin_headers, missing):
        body = {k: v for k, v in SUBACCOUNT.items() if k != missing}
        resp = client.post("/admin/subaccount", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "missing_fields"

    def test_only_wire_field_names_are_read(self, client: TestClient, admin_headers):
        body = {"locationId": "loc1", "did": "15550001111", "inboundWebhookUrl": "https://example/cb"}
        resp = client.post("/admin/subaccount", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "missing_fields"

    def test_non_object_body(self, client: TestClient, admin_headers):
        resp = client.post("/admin/subaccount", json=["loc1"], headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"] == "missing_fields"

    def test_did_taken_by_other_location(self, client: TestClient, admin_headers, provisioned):
        resp = client.post(
            "/admin/subaccount",
            json={**SUBACCOUNT, "locationId": "loc2", "didNumber": "15550001111"},
            headers=admin_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "did_in_use"

    def test_store_error_is_500(self, client: TestClient, admin_headers, app, monkeypatch):
        def boom(**kwargs):
            raise OperationalError("INSERT INTO subaccounts", {}, Exception("database is locked"))

        monkeypatch.setattr(app.state.directory, "upsert", boom)
        resp = client.post("/admin/subaccount", json=SUBACCOUNT, headers=admin_headers)
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "internal_error", "message": "Internal server error"}

    def test_report(self, client: TestClient, admin_headers, provisioned):
        client.post("/webhooks/vodia/new-call", json={"to_number": "5550001111", "from_number": "5552223333"})

        data = client.get("/admin/report?limit=10", headers=admin_headers).json()
        assert [s["locationId"] for s in data["subaccounts"]] == ["loc1"]
        assert [u["phone"] for u in data["users"]] == ["5552223333"]
        assert [c["type"] for c in data["callLogs"]] == ["inbound_call"]


@pytest.mark.integration
class TestInboundWebhook:

    def test_scenario_inbound_call_routed(self, client: TestClient, provisioned, ledger, forwarder):
        resp = client.post(
            "/webhooks/vodia/new-call",
            json={"to_number": "5550001111", "from_number": "555-222-3333", "from_name": "Alice"},
        )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "routedTo": "loc1"}

        [log] = ledger.list_recent()
        assert log.type == "inbound_call"
        assert log.status == "received"

        [(url, payload)] = forwarder.calls
        assert url == "https://example/cb"
        assert payload["phone"] == "5552223333"
        assert payload["first_name"] == "Alice"
        assert payload["direction"] == "inbound"

    def test_forward_failure_does_not_change_response(self, test_settings, database, failing_forwarder, admin_headers):
        app = create_app(settings=test_settings, database=database, forwarder=failing_forwarder)
        with TestClient(app) as c:
            c.post("/admin/subaccount", json=SUBACCOUNT, headers=admin_headers)
            resp = c.post(
                "/webhooks/vodia/new-call",
                json={"to_number": "5550001111", "from_number": "555-222-3333", "from_name": "Alice"},
            )

        assert resp.status_code == 200
        assert resp.json() == {"success": True, "routedTo": "loc1"}
        assert len(failing_forwarder.calls) == 1

    def test_country_code_on_the_call_side(self, client: TestClient, admin_headers, forwarder):
        client.post("/admin/subaccount", json={**SUBACCOUNT, "didNumber": "555-000-1111"}, headers=admin_headers)
        resp = client.post("/webhooks/vodia/new-call", json={"to_number": "+15550001111", "from_number": "5552223333"})
        assert resp.json() == {"success": True, "routedTo": "loc1"}
        assert len(forwarder.calls) == 1

    def test_unknown_did(self, client: TestClient, provisioned, identities, ledger, forwarder):
        resp = client.post("/webhooks/vodia/new-call", json={"to_number": "19998887777", "from_number": "5552223333"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "no_routing_configured"
        assert identities.list_all() == []
        assert ledger.list_recent() == []
        assert forwarder.calls == []

    def test_destination_missing(self, client: TestClient, provisioned):
        resp = client.post("/webhooks/vodia/new-call", json={"from_number": "5552223333"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "destination_missing"

    def test_body_must_be_json_object(self, client: TestClient):
        resp = client.post("/webhooks/vodia/new-call", content=b"nope", headers={"content-type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "invalid_payload"


@pytest.mark.integration
class TestGhlWebhook:

    def test_scenario_outbound_call(self, client: TestClient, provisioned, ledger):
        resp = client.post(
            "/ghl/webhook",
            json={"customData": {
                "type": "outbound_call", "locationId": "loc1",
                "phone": "555-444-5555", "contactId": "c1", "name": "Bob",
            }},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["locationId"] == "loc1"
        assert body["payload"]["from_number"] == "15550001111"
        assert body["payload"]["to_number"] == "5554445555"
        assert body["payload"]["contact_name"] == "Bob"
        assert body["payload"]["contact_id"] == "c1"
        assert [r.type for r in ledger.list_recent()] == ["outbound_call"]

    def test_unknown_location(self, client: TestClient, provisioned, identities, ledger):
        resp = client.post(
            "/ghl/webhook",
            json={"customData": {"type": "outbound_call", "locationId": "nope", "phone": "5554445555"}},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "no_subaccount_found"
        assert identities.list_all() == []
        assert ledger.list_recent() == []

    @pytest.mark.parametrize(
        "body, reason",
        [
            ({}, "type_missing"),
            ({"customData": {"type": "inbound_call", "locationId": "loc1"}}, "unknown_type"),
            ({"customData": {"type": "outbound_call"}}, "location_id_missing"),
            ({"customData": "outbound_call"}, "invalid_payload"),
        ],
    )
    def test_envelope_errors(self, client: TestClient, body, reason):
        resp = client.post("/ghl/webhook", json=body)
        assert resp.status_code == 400
        assert resp.json()["error"] == reason
        assert resp.json()["success"] is False

    def test_identity_store_error_is_500(self, client: TestClient, provisioned, app, ledger, monkeypatch):
        def boom(**kwargs):
            raise OperationalError("INSERT INTO users", {}, Exception("database is locked"))

        monkeypatch.setattr(app.state.identities, "upsert", boom)
        resp = client.post(
            "/ghl/webhook",
            json={"customData": {"type": "outbound_call", "locationId": "loc1", "phone": "5554445555"}},
        )
        assert resp.status_code == 500
        assert resp.json()["error"] == "internal_error"
        assert ledger.list_recent() == []
