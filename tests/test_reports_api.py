"""
Report endpoints over HTTP: wire envelope, ordering and the admin gate.
"""

from __future__ import annotations

import pytest
from fastapi import Depends

from cityfix.config import settings
from cityfix.dependencies import get_kv_store, get_report_repository, get_report_service
from cityfix.main import app
from cityfix.services.report_service import ReportService

API = settings.API_PREFIX

POTHOLE = {
    "title": "Pothole",
    "description": "Deep hole",
    "type": "infrastructure",
    "location": "Main St",
}


def _auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def _create(client, **overrides) -> dict:
    response = client.post(f"{API}/reports", json={**POTHOLE, **overrides})
    assert response.status_code == 200, response.text
    return response.json()["report"]


def test_create_report_scenario(client):
    response = client.post(f"{API}/reports", json=POTHOLE)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    report = body["report"]
    assert report["status"] == "pending"
    assert isinstance(report["timestamp"], int)
    assert isinstance(report["id"], str) and report["id"]
    assert report["imageUrl"] is None


def test_create_then_fetch_round_trip(client):
    created = _create(client, imageUrl="https://img.example/p.png")

    response = client.get(f"{API}/reports/{created['id']}")

    assert response.status_code == 200
    fetched = response.json()["report"]
    assert fetched == created
    assert {k: fetched[k] for k in POTHOLE} == POTHOLE


def test_create_missing_field_is_400(client):
    response = client.post(f"{API}/reports", json={"title": "Pothole", "type": "safety"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Missing required fields"}


def test_create_with_malformed_body_is_400(client):
    response = client.post(f"{API}/reports", json={**POTHOLE, "title": ["not", "a", "string"]})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_list_reports_empty_store(client):
    response = client.get(f"{API}/reports")

    assert response.status_code == 200
    assert response.json() == {"success": True, "reports": []}


def test_list_reports_newest_first(client):
    clock = iter([3000, 1000, 2000])

    def service_with_clock(repository=Depends(get_report_repository)):
        return ReportService(repository, clock=lambda: next(clock))

    app.dependency_overrides[get_report_service] = service_with_clock

    for title in ["Newest", "Oldest", "Middle"]:
        _create(client, title=title)

    reports = client.get(f"{API}/reports").json()["reports"]

    assert [r["title"] for r in reports] == ["Newest", "Middle", "Oldest"]
    assert [r["timestamp"] for r in reports] == [3000, 2000, 1000]


def test_list_reports_filters(client, admin_token):
    pothole = _create(client)
    _create(client, title="Dark corner", type="safety")
    client.patch(
        f"{API}/reports/{pothole['id']}/status",
        json={"status": "resolved"},
        headers=_auth(admin_token),
    )

    resolved = client.get(f"{API}/reports", params={"status": "resolved"}).json()["reports"]
    safety = client.get(f"{API}/reports", params={"type": "safety"}).json()["reports"]
    bad = client.get(f"{API}/reports", params={"status": "closed"})

    assert [r["id"] for r in resolved] == [pothole["id"]]
    assert [r["title"] for r in safety] == ["Dark corner"]
    assert bad.status_code == 400
    assert bad.json()["success"] is False


def test_summary(client):
    _create(client)
    _create(client, type="traffic")

    body = client.get(f"{API}/reports/summary").json()

    assert body["success"] is True
    assert body["summary"]["total"] == 2
    assert body["summary"]["by_status"]["pending"] == 2
    assert body["summary"]["by_type"]["traffic"] == 1


def test_get_missing_report_is_404(client):
    response = client.get(f"{API}/reports/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Report not found"}


# ─────────────────────────────────────────
# Status updates
# ─────────────────────────────────────────

def test_update_status_as_admin(client, admin_token):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json={"status": "in-progress"},
        headers=_auth(admin_token),
    )

    assert response.status_code == 200
    updated = response.json()["report"]
    assert updated == {**created, "status": "in-progress"}


def test_update_status_without_auth_is_401(client):
    created = _create(client)

    response = client.patch(f"{API}/reports/{created['id']}/status", json={"status": "resolved"})

    assert response.status_code == 401
    assert response.json()["success"] is False
    stored = client.get(f"{API}/reports/{created['id']}").json()["report"]
    assert stored["status"] == "pending"


@pytest.mark.parametrize(
    "header",
    [
        f"Bearer {settings.ANON_KEY}",
        "Bearer not-a-jwt",
        "Bearer",
        "",
    ],
)
def test_update_status_with_bad_credentials_is_401(client, header):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json={"status": "resolved"},
        headers={"Authorization": header},
    )

    assert response.status_code == 401
    stored = client.get(f"{API}/reports/{created['id']}").json()["report"]
    assert stored["status"] == "pending"


def test_update_status_as_non_admin_is_403(client, user_token):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json={"status": "resolved"},
        headers=_auth(user_token),
    )

    assert response.status_code == 403
    assert client.get(f"{API}/reports/{created['id']}").json()["report"]["status"] == "pending"


def test_rejected_credentials_never_touch_the_store(client, fake_kv, user_token):
    app.dependency_overrides[get_kv_store] = lambda: fake_kv

    for headers in [{}, {"Authorization": f"Bearer {settings.ANON_KEY}"}, _auth(user_token)]:
        client.patch(f"{API}/reports/1/status", json={"status": "resolved"}, headers=headers)
        client.delete(f"{API}/reports/1", headers=headers)

    assert fake_kv.calls == []


def test_update_status_invalid_value_is_400(client, admin_token):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json={"status": "closed"},
        headers=_auth(admin_token),
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid status"}
    assert client.get(f"{API}/reports/{created['id']}").json()["report"]["status"] == "pending"


def test_update_status_missing_report_is_404(client, admin_token):
    response = client.patch(
        f"{API}/reports/nope/status",
        json={"status": "resolved"},
        headers=_auth(admin_token),
    )

    assert response.status_code == 404


# ─────────────────────────────────────────
# Deletion
# ─────────────────────────────────────────

def test_delete_report_flow(client, admin_token):
    created = _create(client)

    first = client.delete(f"{API}/reports/{created['id']}", headers=_auth(admin_token))
    second = client.delete(f"{API}/reports/{created['id']}", headers=_auth(admin_token))

    assert first.status_code == 200
    assert first.json() == {"success": True, "message": "Report deleted successfully"}
    assert second.status_code == 404
    assert second.json()["success"] is False
    assert client.get(f"{API}/reports").json()["reports"] == []


def test_delete_without_auth_is_401(client):
    created = _create(client)

    response = client.delete(f"{API}/reports/{created['id']}")

    assert response.status_code == 401
    assert client.get(f"{API}/reports/{created['id']}").status_code == 200


def test_update_after_delete_is_404(client, admin_token):
    created = _create(client)
    client.delete(f"{API}/reports/{created['id']}", headers=_auth(admin_token))

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json={"status": "resolved"},
        headers=_auth(admin_token),
    )

    assert response.status_code == 404
    assert client.get(f"{API}/reports/{created['id']}").status_code == 404


def test_unknown_route_uses_error_envelope(client):
    response = client.get(f"{API}/nothing-here")

    assert response.status_code == 404
    assert response.json()["success"] is False


# ─────────────────────────────────────────
# Malformed bodies
# ─────────────────────────────────────────

JSON_HEADERS = {"Content-Type": "application/json"}


@pytest.mark.parametrize("body", [b"{bad", b"", b"[1, 2]"])
def test_update_status_without_auth_is_401_whatever_the_body(client, body):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        content=body,
        headers=JSON_HEADERS,
    )

    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized - Admin access required"


def test_update_status_with_non_admin_and_bad_body_is_403(client, user_token):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        content=b"{bad",
        headers={**JSON_HEADERS, **_auth(user_token)},
    )

    assert response.status_code == 403


def test_update_status_as_admin_with_bad_json_is_400(client, admin_token):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        content=b"{bad",
        headers={**JSON_HEADERS, **_auth(admin_token)},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid JSON body"}


@pytest.mark.parametrize("body", [[1, 2], {"status": 3}, "resolved"])
def test_update_status_as_admin_with_wrong_shape_is_400(client, admin_token, body):
    created = _create(client)

    response = client.patch(
        f"{API}/reports/{created['id']}/status",
        json=body,
        headers=_auth(admin_token),
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid status"}
    assert client.get(f"{API}/reports/{created['id']}").json()["report"]["status"] == "pending"


def test_create_with_invalid_json_is_400(client):
    response = client.post(f"{API}/reports", content=b"{bad json", headers=JSON_HEADERS)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid JSON body"}


def test_create_error_names_the_field_only(client):
    response = client.post(f"{API}/reports", json={**POTHOLE, "title": ["not", "a", "string"]})

    error = response.json()["error"]
    assert error.startswith("Invalid request: title: ")
    assert not any(ch.isdigit() for ch in error)
