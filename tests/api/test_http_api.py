from __future__ import annotations

import pytest

from src.headcount_workflow.headcount_workflow.database.memory_store import InMemoryRecordStore
from src.headcount_workflow.headcount_workflow.main import create_app

from conftest import seed_tables


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(store=InMemoryRecordStore(seed_tables()))


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_id):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id


def _submit(client, **overrides):
    body = {"position_id": "p1", "requested_headcount": 8, "reason": "New platform squad"}
    body.update(overrides)
    return client.post("/api/headcount-requests", json=body)


def test_requires_session(client):
    res = client.get("/api/companies/c1/headcount-requests")
    assert res.status_code == 401
    assert res.get_json()["success"] is False


def test_app_uses_testing_settings(app):
    assert app.config["TESTING"] is True
    assert "headcount_container" in app.extensions


def test_submit_and_approve_flow(client):
    _login(client, "u-requester")
    res = _submit(client, governance_body_id="b-board")
    assert res.status_code == 201
    request_id = res.get_json()["request"]["request_id"]
    assert res.get_json()["request"]["status"] == "pending"

    res = client.get("/api/companies/c1/headcount-requests")
    data = res.get_json()
    assert res.status_code == 200
    assert [r["request_id"] for r in data["pending"]] == [request_id]
    assert data["can_approve"] is False
    assert [b["body_id"] for b in data["governance_bodies"]] == ["b-board"]

    res = client.post(f"/api/headcount-requests/{request_id}/approve", json={"acknowledged": True})
    assert res.status_code == 403

    _login(client, "u-chair")
    res = client.post(f"/api/headcount-requests/{request_id}/approve", json={"notes": "Budgeted"})
    assert res.status_code == 400

    res = client.post(f"/api/headcount-requests/{request_id}/approve", json={"acknowledged": True, "notes": "Budgeted"})
    assert res.status_code == 200
    assert res.get_json()["request"]["status"] == "approved"
    assert res.get_json()["request"]["reviewed_at"].endswith("Z")

    res = client.post(f"/api/headcount-requests/{request_id}/reject", json={"acknowledged": True})
    assert res.status_code == 409

    detail = client.get(f"/api/headcount-requests/{request_id}").get_json()
    assert detail["request"]["status"] == "approved"
    assert len(detail["signatures"]) == 1
    assert detail["signatures"][0]["verified"] is True
    assert detail["signatures"][0]["signature"]["signature_type"] == "approval"
    assert [h["new_status"] for h in detail["history"]] == ["pending", "approved"]


def test_submit_validation_and_not_found(client):
    _login(client, "u-requester")
    assert _submit(client, requested_headcount=-3).status_code == 400
    assert _submit(client, reason="").status_code == 400
    assert _submit(client, position_id="missing").status_code == 404
    assert client.get("/api/headcount-requests/missing").status_code == 404
    assert client.post("/api/headcount-requests/missing/approve", json={"acknowledged": True}).status_code == 404


def test_governance_management_endpoints(client):
    _login(client, "u-chair")

    res = client.post(
        "/api/companies/c1/governance-bodies",
        json={"name": "Executive Committee", "body_type": "management", "can_approve_headcount": True},
    )
    assert res.status_code == 201
    body_id = res.get_json()["body"]["body_id"]

    res = client.post(
        f"/api/governance-bodies/{body_id}/members",
        json={"employee_id": "u-requester", "role_in_body": "member", "start_date": "2024-01-01"},
    )
    assert res.status_code == 201
    member_id = res.get_json()["member"]["member_id"]
    assert res.get_json()["member"]["start_date"] == "2024-01-01"

    bodies = client.get("/api/companies/c1/governance-bodies?approving_only=1").get_json()["bodies"]
    assert sorted(b["body_id"] for b in bodies) == sorted(["b-board", body_id])

    res = client.patch(f"/api/governance-members/{member_id}", json={"is_active": False})
    assert res.status_code == 200
    assert res.get_json()["member"]["is_active"] is False

    res = client.patch(f"/api/governance-bodies/{body_id}", json={"body_type": "guild"})
    assert res.status_code == 400

    members = client.get("/api/governance-bodies/b-board/members").get_json()["members"]
    assert [m["employee_id"] for m in members] == ["u-chair"]


def test_lookup_endpoint(client):
    _login(client, "u-chair")
    data = client.get("/api/lookups/governance_role").get_json()
    assert [v["code"] for v in data["values"]] == ["chair", "vice_chair", "secretary", "member"]


def _store(app):
    return app.extensions["headcount_container"].store


@pytest.mark.parametrize("ack", ["false", "yes", "true", 1, None])
def test_approve_accepts_only_json_true_acknowledgment(app, client, ack):
    _login(client, "u-requester")
    request_id = _submit(client).get_json()["request"]["request_id"]

    _login(client, "u-chair")
    res = client.post(f"/api/headcount-requests/{request_id}/approve", json={"acknowledged": ack})

    assert res.status_code == 400
    assert _store(app).count("headcount_request_signatures") == 0
    assert client.get(f"/api/headcount-requests/{request_id}").get_json()["request"]["status"] == "pending"


def test_member_without_authority_cannot_grant_itself_approval(app, client):
    _login(client, "u-outsider")
    request_id = _submit(client).get_json()["request"]["request_id"]
    approve = f"/api/headcount-requests/{request_id}/approve"
    assert client.post(approve, json={"acknowledged": True}).status_code == 403

    res = client.post(
        "/api/governance-bodies/b-board/members",
        json={"employee_id": "u-outsider", "role_in_body": "member", "start_date": "2024-01-01"},
    )
    assert res.status_code == 403
    assert client.patch("/api/governance-bodies/b-social", json={"can_approve_headcount": True}).status_code == 403
    assert client.patch("/api/governance-members/m-outsider", json={"is_active": True}).status_code == 403
    res = client.post(
        "/api/companies/c1/governance-bodies",
        json={"name": "Shadow Board", "body_type": "board", "can_approve_headcount": True},
    )
    assert res.status_code == 403

    assert client.post(approve, json={"acknowledged": True}).status_code == 403
    assert _store(app).count("governance_members") == 2
    assert _store(app).count("headcount_request_signatures") == 0


def test_governance_flags_reject_string_booleans(client):
    _login(client, "u-chair")
    res = client.post(
        "/api/companies/c1/governance-bodies",
        json={"name": "Works Council", "body_type": "committee", "can_approve_headcount": "false"},
    )
    assert res.status_code == 400
    assert client.patch("/api/governance-bodies/b-social", json={"is_active": "no"}).status_code == 400


def test_company_listing_reports_limit_and_truncation(client):
    _login(client, "u-requester")
    ids = [_submit(client, requested_headcount=n).get_json()["request"]["request_id"] for n in (6, 7, 8)]

    data = client.get("/api/companies/c1/headcount-requests?limit=2").get_json()
    assert data["limit"] == 2
    assert data["truncated"] is True
    assert len(data["pending"]) == 2

    data = client.get("/api/companies/c1/headcount-requests").get_json()
    assert data["truncated"] is False
    assert sorted(r["request_id"] for r in data["pending"]) == sorted(ids)

    assert client.get("/api/companies/c1/headcount-requests?limit=0").status_code == 400
    assert client.get("/api/companies/c1/headcount-requests?limit=abc").status_code == 400
