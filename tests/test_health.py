"""
Health endpoint tests.
"""


def test_health_endpoint(client):
    """Test that the /health endpoint returns 200 OK."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert "data" in data
    assert data["data"]["status"] == "healthy"
    assert "timestamp" in data["data"]
    assert "version" in data["data"]
    assert data["data"]["service"] == "ClinicQueue"


def test_health_ready_endpoint(client):
    """Readiness reports the memory backend without touching MongoDB."""
    response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["data"]["ready"] is True
    assert data["data"]["checks"]["database"] == "memory"


def test_root_endpoint(client):
    """Test that the root endpoint returns API information."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert "service" in data
    assert "version" in data
    assert data["status"] == "running"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-abc.123"})
    assert response.headers["X-Request-ID"] == "req-abc.123"
    assert response.json()["request_id"] == "req-abc.123"


def test_malformed_request_id_is_replaced(client):
    response = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert response.headers["X-Request-ID"] != "bad id with spaces"
    assert response.json()["request_id"] == response.headers["X-Request-ID"]
