from __future__ import annotations

import logging
from datetime import datetime


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_create_session_returns_camel_case_session(client):
    response = client.post("/api/whatsapp/session", json={"userId": "user-1", "label": "Loja"})

    assert response.status_code == 200
    body = response.json()
    assert body["ownerUserId"] == "user-1"
    assert body["status"] == "waiting_qr"
    assert body["label"] == "Loja"
    assert body["qrPayload"].startswith("2@")
    assert body["pairedAt"] is None
    created = datetime.fromisoformat(body["createdAt"])
    expires = datetime.fromisoformat(body["expiresAt"])
    assert (expires - created).total_seconds() == 60


def test_create_session_default_label(client):
    response = client.post("/api/whatsapp/session", json={"userId": "user-1"})

    assert response.json()["label"] == "Novo Dispositivo"


def test_create_session_requires_user_id(client):
    response = client.post("/api/whatsapp/session", json={})

    assert response.status_code == 422


def test_simulate_pair(client):
    session_id = client.post("/api/whatsapp/session", json={"userId": "user-1"}).json()["id"]

    response = client.post(f"/api/whatsapp/session/{session_id}/simulate-pair")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    store = client.app.state.pairing_session_store
    assert store.get(session_id).status == "paired"


def test_simulate_pair_unknown_session(client):
    response = client.post("/api/whatsapp/session/does-not-exist/simulate-pair")

    assert response.status_code == 404
    assert response.json() == {"error": "Session not found"}
    assert len(client.app.state.pairing_session_store) == 0


def test_correlation_id_is_echoed(client):
    response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert response.headers["x-correlation-id"] == "abc-123"


def test_unsafe_correlation_id_is_replaced(client):
    response = client.get("/health", headers={"X-Correlation-ID": "x" * 65})

    correlation_id = response.headers["x-correlation-id"]
    assert correlation_id != "x" * 65
    assert len(correlation_id) == 32


def test_request_completion_is_logged(client, caplog):
    with caplog.at_level(logging.INFO, logger="imobi_ai.observability.middleware"):
        client.post("/api/whatsapp/session/does-not-exist/simulate-pair")

    record = next(r for r in caplog.records if r.getMessage() == "request_completed")
    assert record.method == "POST"
    assert record.path == "/api/whatsapp/session/does-not-exist/simulate-pair"
    assert record.status_code == 404
