def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}


def test_security_headers_are_applied(client):
    response = client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_oversized_request_is_rejected(client):
    response = client.post(
        "/api/timetables/",
        content=b"x" * 64,
        headers={"Content-Type": "application/json", "Content-Length": str(10 * 1024 * 1024 * 1024)},
    )

    assert response.status_code == 413
    assert response.json()["message"] == "Request body too large"
