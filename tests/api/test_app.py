"""Tests for application assembly."""

from starlette.testclient import TestClient

from api.sessions import SessionRegistry


def test_health(app):
    assert TestClient(app).get("/health").json() == {"status": "ok"}


def test_registry_on_app_state(app):
    assert isinstance(app.state.sessions, SessionRegistry)


def test_shutdown_closes_screens(app, valkey):
    with TestClient(app, headers={"X-Session-Id": "screen-9"}) as client:
        client.post("/api/actions", json={
            "domain": "draft", "action": "update", "data": {"attended_by": "Ravi"},
        })
        assert len(app.state.sessions) == 1

    assert len(app.state.sessions) == 0
    assert "banquet:session:screen-9:draft" in valkey.data


def test_unhandled_error_is_500(app, booking_client):
    booking_client.search_catalog.side_effect = RuntimeError("bug")
    client = TestClient(app, raise_server_exceptions=False, headers={"X-Hotel-Id": "290", "X-Login-Id": "17"})

    response = client.get("/api/data/catalog/party")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
