import logging

from fastapi.testclient import TestClient

from main import create_app


def test_root_banner_is_logged(client, collection, drain):
    r = client.get("/", headers={"User-Agent": "pytest-agent"})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["services"]["status"] == "Operativo"

    drain()
    entry = next(d for d in collection.docs if d["message"] == "Acceso a ruta principal")
    assert entry["data"]["userAgent"] == "pytest-agent"


def test_health_reports_services(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["uptime"] >= 0
    assert body["timestamp"]
    assert body["services"] == {"mysql": "connected", "mongodb": "connected", "mailhog": "configured"}


def test_health_degrades_when_store_is_down(client, store):
    store.alive = False
    body = client.get("/health").json()
    assert body["status"] == "degraded"
    assert body["services"]["mysql"] == "disconnected"


def test_lifecycle_records_start_and_stop(context, collection):
    with TestClient(create_app(context=context)) as test_client:
        assert test_client.get("/health").status_code == 200

    messages = collection.messages("info")
    assert messages[0] == "Servidor iniciado correctamente"
    assert messages[-1] == "Servidor cerrándose"
    assert context.log_sink.is_connected is False


def test_unknown_route_is_an_envelope(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_error_responses_are_logged_with_deferred_formatting(client, caplog):
    with caplog.at_level(logging.INFO, logger="core.middleware"):
        client.get("/nope")
    records = [r for r in caplog.records if r.name == "core.middleware"]
    assert len(records) == 1
    assert records[0].msg.startswith("request id=%s")
    assert "/nope" in records[0].args
    assert "status=404" in records[0].getMessage()


def test_cors_allows_configured_origin(client):
    r = client.options(
        "/usuarios",
        headers={"Origin": "http://localhost:3001", "Access-Control-Request-Method": "GET"},
    )
    assert r.headers["access-control-allow-origin"] == "http://localhost:3001"
