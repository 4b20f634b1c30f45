from fastapi.testclient import TestClient

from worktime.main import app

client = TestClient(app)


def _auth_headers(user_id: int) -> dict:
    resp = client.post("/auth/token", json={"user_id": user_id})
    assert resp.status_code == 200, f"token request failed: {resp.status_code} {resp.text}"
    data = resp.json()
    assert "access_token" in data, f"token response missing access_token: {data}"
    return {"Authorization": f"Bearer {data['access_token']}"}


def test_missing_authorization_header_401():
    r = client.post("/sessions/start", json={})
    assert r.status_code == 401


def test_wrong_scheme_401(company_factory, user_factory):
    user = user_factory(company_id=company_factory().id)
    token = _auth_headers(user.id)["Authorization"].split(" ", 1)[1]
    r = client.post("/sessions/start", json={}, headers={"Authorization": f"Basic {token}"})
    assert r.status_code == 401


def test_garbled_bearer_token_401():
    r = client.post("/sessions/start", json={}, headers={"Authorization": "Bearer not-a-real-token"})
    assert r.status_code == 401


def test_token_for_deleted_user_401():
    r = client.get("/sessions/current", headers=_auth_headers(999999))
    assert r.status_code == 401


def test_session_lifecycle_over_http(company_factory, user_factory):
    user = user_factory(company_id=company_factory().id)
    headers = _auth_headers(user.id)

    current = client.get("/sessions/current", headers=headers)
    assert current.status_code == 200
    assert current.json() is None

    started = client.post("/sessions/start", headers=headers, json={"project": "alpha"})
    assert started.status_code == 200, started.text
    session_id = started.json()["id"]
    assert started.json()["status"] == "ONGOING"

    again = client.post("/sessions/start", headers=headers, json={})
    assert again.status_code == 409
    assert again.json()["error"] == "AlreadyActive"

    brk = client.post(f"/sessions/{session_id}/break/start", headers=headers, json={"type": "PAID"})
    assert brk.status_code == 200, brk.text
    assert brk.json()["end_time"] is None

    assert client.get("/sessions/current", headers=headers).json()["status"] == "PAUSED"

    second_break = client.post(f"/sessions/{session_id}/break/start", headers=headers, json={})
    assert second_break.status_code == 409
    assert second_break.json()["error"] == "InvalidState"

    end = client.post(f"/sessions/{session_id}/break/end", headers=headers)
    assert end.status_code == 200
    assert end.json()["duration"] is not None

    no_break = client.post(f"/sessions/{session_id}/break/end", headers=headers)
    assert no_break.status_code == 409
    assert no_break.json()["error"] == "NoOpenBreak"

    stopped = client.post(f"/sessions/{session_id}/stop", headers=headers, json={})
    assert stopped.status_code == 200, stopped.text
    body = stopped.json()
    assert body["status"] == "COMPLETED"
    assert len(body["breaks"]) == 1
    assert body["net_duration"] == max(body["total_duration"] - body["break_duration"], 0)

    stop_again = client.post(f"/sessions/{session_id}/stop", headers=headers, json={})
    assert stop_again.status_code == 409
    assert stop_again.json()["error"] == "AlreadyCompleted"

    mine = client.get("/sessions/me", headers=headers)
    assert [s["id"] for s in mine.json()] == [session_id]


def test_edit_and_history_over_http(company_factory, user_factory):
    company = company_factory()
    user = user_factory(company_id=company.id)
    admin = user_factory(company_id=company.id, role="ADMIN")
    headers = _auth_headers(user.id)

    session_id = client.post("/sessions/start", headers=headers, json={}).json()["id"]
    client.post(
        f"/sessions/{session_id}/stop",
        headers=headers,
        json={"end_time": "2099-01-01T17:00:00+00:00"},
    )

    missing_reason = client.put(
        f"/sessions/{session_id}",
        headers=headers,
        json={"note": "x", "reason": ""},
    )
    assert missing_reason.status_code == 400
    assert missing_reason.json()["error"] == "ReasonRequired"

    edited = client.put(
        f"/sessions/{session_id}",
        headers=_auth_headers(admin.id),
        json={"project": "beta", "reason": "wrong project"},
    )
    assert edited.status_code == 200, edited.text
    assert edited.json()["project"] == "beta"

    history = client.get(f"/sessions/{session_id}/history", headers=headers)
    assert history.status_code == 200
    rows = history.json()
    assert len(rows) == 1
    assert rows[0]["edited_by"] == admin.id
    assert rows[0]["changes"] == {"project": {"old": None, "new": "beta"}}

    assert client.get(f"/sessions/{session_id}/history", headers=headers).json() == rows

    audit = client.get("/stats/audit-log", headers=_auth_headers(admin.id))
    assert audit.status_code == 200
    assert [r["id"] for r in audit.json()] == [rows[0]["id"]]

    not_admin = client.get("/stats/audit-log", headers=headers)
    assert not_admin.status_code == 403


def test_cross_company_admin_is_forbidden_and_missing_is_404(company_factory, user_factory):
    company_a = company_factory("A")
    company_b = company_factory("B")
    admin_a = user_factory(company_id=company_a.id, role="ADMIN")
    user_b = user_factory(company_id=company_b.id)

    session_id = client.post("/sessions/start", headers=_auth_headers(user_b.id), json={}).json()["id"]

    admin_headers = _auth_headers(admin_a.id)

    r = client.get(f"/sessions/{session_id}", headers=admin_headers)
    assert r.status_code == 403

    r = client.post(f"/sessions/{session_id}/stop", headers=admin_headers, json={})
    assert r.status_code == 403

    r = client.get("/sessions/987654", headers=admin_headers)
    assert r.status_code == 404

    r = client.get(f"/users/{user_b.id}", headers=admin_headers)
    assert r.status_code == 403

    assert client.get("/sessions/current", headers=_auth_headers(user_b.id)).json()["status"] == "ONGOING"


def test_legacy_time_entries_over_http(company_factory, user_factory):
    user = user_factory(company_id=company_factory().id)
    headers = _auth_headers(user.id)

    stop_first = client.post(
        "/time_entries", headers=headers, json={"time": "2026-01-12T08:00:00Z", "type": "STOP"}
    )
    assert stop_first.status_code == 409

    start = client.post(
        "/time_entries", headers=headers, json={"time": "2026-01-12T08:00:00Z", "type": "START"}
    )
    assert start.status_code == 200, start.text
    entry_id = start.json()["id"]

    flip = client.put(
        f"/time_entries/{entry_id}", headers=headers, json={"type": "STOP", "reason": "oops"}
    )
    assert flip.status_code == 400
    assert flip.json()["error"] == "TypeImmutable"

    moved = client.put(
        f"/time_entries/{entry_id}",
        headers=headers,
        json={"time": "2026-01-12T07:45:00Z", "reason": "clock skew"},
    )
    assert moved.status_code == 200, moved.text

    history = client.get(f"/time_entries/{entry_id}/history", headers=headers).json()
    assert len(history) == 1
    assert set(history[0]["changes"]) == {"time"}
