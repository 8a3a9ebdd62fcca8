"""
Staff queue endpoint tests.
"""

import pytest

from conftest import DERM_ID, GP_ID, OTHER_TENANT_ID, STAFF_HEADERS, token_payload

BASE = "/tenants/demo-clinic"


@pytest.fixture
def issued(client, open_clinic):
    """Two GP tokens and one dermatology token, in that order."""
    tokens = []
    for specialist_id, phone in ((GP_ID, "9876500001"), (GP_ID, "9876500002"), (DERM_ID, "9876500003")):
        response = client.post("/public/demo-clinic/tokens", json=token_payload(specialist_id, phone=phone))
        assert response.status_code == 201
        tokens.append(response.json()["data"])
    return tokens


def test_missing_headers_unauthorized(client):
    response = client.get(f"{BASE}/queue")

    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "UNAUTHORIZED"
    assert body["success"] is False


def test_malformed_headers_rejected(client):
    response = client.get(f"{BASE}/queue", headers={"X-Tenant-ID": "bad tenant!", "X-Staff-ID": "s1"})
    assert response.status_code == 400
    assert response.json()["error"] == "INVALID_STAFF_IDENTITY"


def test_tenant_mismatch_forbidden(client):
    headers = {"X-Tenant-ID": OTHER_TENANT_ID, "X-Staff-ID": "staff-reception-1"}
    response = client.get(f"{BASE}/queue", headers=headers)

    assert response.status_code == 403
    body = response.json()
    assert body["error"] == "FORBIDDEN"
    assert body["message"] == "Unauthorized"


def test_unknown_clinic_not_found(client):
    response = client.get("/tenants/nowhere/queue", headers=STAFF_HEADERS)
    assert response.status_code == 404


def test_queue(client, issued):
    response = client.get(f"{BASE}/queue", headers=STAFF_HEADERS)

    assert response.status_code == 200
    queue = response.json()["data"]
    assert [t["token_number"] for t in queue] == [1, 1, 2]
    assert {t["id"] for t in queue} == {t["token_id"] for t in issued}
    assert queue[0]["patient"]["phone"] in {"9876500001", "9876500003"}

    gp_only = client.get(f"{BASE}/queue", params={"specialistId": GP_ID}, headers=STAFF_HEADERS).json()["data"]
    assert [t["id"] for t in gp_only] == [issued[0]["token_id"], issued[1]["token_id"]]


def test_call_next(client, issued):
    response = client.post(f"{BASE}/queue/call-next", json={"specialistId": GP_ID}, headers=STAFF_HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == issued[0]["token_id"]
    assert data["status"] == "CALLED"
    assert data["patient"]["phone"] == "9876500001"
    assert data["patient"]["dob"] == "1990-05-17"
    assert data["specialist"]["id"] == GP_ID


def test_call_next_without_body(client, issued):
    response = client.post(f"{BASE}/queue/call-next", headers=STAFF_HEADERS)
    assert response.status_code == 200
    assert response.json()["data"]["token_number"] == 1


def test_call_next_empty_queue(client):
    response = client.post(f"{BASE}/queue/call-next", json={}, headers=STAFF_HEADERS)

    assert response.status_code == 200
    body = response.json()
    assert body["data"] is None
    assert body["message"] == "No tokens in queue"


def test_status_updates(client, issued):
    token_id = issued[0]["token_id"]
    url = f"{BASE}/tokens/{token_id}/status"

    skipped_queue = client.put(url, json={"status": "CALLED"}, headers=STAFF_HEADERS)
    assert skipped_queue.status_code == 422
    assert skipped_queue.json()["error"] == "ILLEGAL_STATUS_TRANSITION"

    client.post(f"{BASE}/queue/call-next", json={"specialistId": GP_ID}, headers=STAFF_HEADERS)
    response = client.put(url, json={"status": "IN_CONSULTATION"}, headers=STAFF_HEADERS)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "IN_CONSULTATION"

    response = client.put(url, json={"status": "COMPLETED"}, headers=STAFF_HEADERS)
    assert response.json()["data"]["status"] == "COMPLETED"


def test_status_update_rejects_unknown_status(client, issued):
    response = client.put(
        f"{BASE}/tokens/{issued[0]['token_id']}/status",
        json={"status": "TELEPORTED"},
        headers=STAFF_HEADERS,
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "INVALID_INPUT"
    assert body["details"]["errors"][0]["field"] == "status"


def test_status_update_unknown_token(client):
    response = client.put(f"{BASE}/tokens/missing/status", json={"status": "EXPIRED"}, headers=STAFF_HEADERS)
    assert response.status_code == 404


def test_stats(client, issued):
    client.put(f"{BASE}/tokens/{issued[2]['token_id']}/status", json={"status": "EXPIRED"}, headers=STAFF_HEADERS)

    data = client.get(f"{BASE}/stats", headers=STAFF_HEADERS).json()["data"]
    assert data == {"total": 3, "waiting": 2, "completed": 0, "expired": 1}

    gp = client.get(f"{BASE}/stats", params={"specialistId": GP_ID}, headers=STAFF_HEADERS).json()["data"]
    assert gp["total"] == 2


def test_doctor_status(client):
    response = client.put(
        f"{BASE}/doctor-status", json={"specialistId": DERM_ID, "status": "IN"}, headers=STAFF_HEADERS
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["specialist_id"] == DERM_ID
    assert data["status"] == "IN"
    assert data["set_by"] == "staff-reception-1"
    assert data["date"] == "2026-03-10"

    board = client.get("/public/demo-clinic/status").json()["data"]["doctors"]
    assert {d["id"]: d["status"] for d in board} == {GP_ID: "OUT", DERM_ID: "IN"}


def test_general_doctor_status(client):
    response = client.put(f"{BASE}/doctor-status", json={"status": "IN"}, headers=STAFF_HEADERS)

    assert response.status_code == 200
    assert response.json()["data"]["specialist_id"] is None
    board = client.get("/public/demo-clinic/status").json()["data"]["doctors"]
    assert all(d["status"] == "IN" for d in board)
