def test_health_endpoints(client):
    assert client.get("/api/health").json() == {"status": "ok"}

    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code == 200
    payload = ready.json()
    assert payload["status"] == "ok"
    assert payload["database"] == {"ok": True, "missing_tables": [], "error": None}


def test_security_headers_are_set(client):
    response = client.get("/api/health")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_oversized_body_is_rejected(client):
    response = client.post(
        "/api/schedule/check-conflicts",
        content=b" " * 1_000_001,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 413
    assert response.json()["message"] == "Request body too large"
