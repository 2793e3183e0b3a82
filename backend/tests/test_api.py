from __future__ import annotations

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from bulkadmin.runtime import build_runtime
from bulkadmin.server import create_session_app
from tests.helpers.fakes import FakeScheduler, make_token


@pytest.fixture(scope="module")
def public_pem():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.public_key().public_bytes(
        serialization.Encoding.PEM, serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode("ascii")


@pytest.fixture
def remote(public_pem):
    """Fake remote API. `refresh` holds the next refresh response body."""
    state = {
        "session_token": make_token(exp=2_000_000_000, sub="a@x.com"),
        "refresh": {"token": make_token(exp=2_000_003_600, sub="a@x.com")},
    }

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/get_public_key.php":
            return httpx.Response(200, text=public_pem)
        if path == "/login.php":
            return httpx.Response(200, json={"status": True, "token": "temp"})
        if path == "/otp.php":
            return httpx.Response(200, json={"status": True, "token": state["session_token"], "role": "admin"})
        if path == "/refresh_token.php":
            return httpx.Response(200, json=state["refresh"])
        return httpx.Response(404)

    state["transport"] = httpx.MockTransport(handler)
    return state


@pytest.fixture
def client(config, remote):
    scheduler = FakeScheduler()
    runtime = build_runtime(config, scheduler=scheduler, transport=remote["transport"])
    app = create_session_app(runtime)
    with TestClient(app) as test_client:
        yield test_client
    scheduler.discard_spawned()


def _sign_in(client):
    assert client.post("/auth/login", json={"email": "a@x.com", "password": "pw"}).status_code == 200
    assert client.post("/auth/otp", json={"otp": "123456"}).status_code == 200


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_anonymous_session(client):
    body = client.get("/session").json()

    assert body["is_authenticated"] is False
    assert body["user_email"] is None
    assert client.get("/session/token").status_code == 401
    assert client.get("/session/guard", params={"path": "/dashboard"}).json() == {
        "allowed": False,
        "redirect": "/login",
        "replace": True,
    }


def test_sign_in_through_login_and_otp(client, remote):
    _sign_in(client)

    body = client.get("/session").json()
    assert body["is_authenticated"] is True
    assert body["user_email"] == "a@x.com"
    assert body["role"] == "admin"
    assert body["location"] == "/dashboard"
    assert "token" not in body
    assert client.get("/session/token").json() == {"token": remote["session_token"]}
    assert client.get("/session/guard", params={"path": "/login"}).json()["redirect"] == "/dashboard"


def test_activity_endpoint_validates_event(client):
    _sign_in(client)

    assert client.post("/session/activity", json={"event": "keydown"}).json() == {"is_authenticated": True}
    assert client.post("/session/activity", json={"event": "blink"}).status_code == 400


def test_refresh_endpoint_swaps_token(client, remote):
    _sign_in(client)

    assert client.post("/session/refresh").json() == {"success": True}
    assert client.get("/session/token").json() == {"token": remote["refresh"]["token"]}


def test_refresh_endpoint_failure_logs_out(client, remote):
    _sign_in(client)
    remote["refresh"] = {"message": "expired"}

    assert client.post("/session/refresh").status_code == 502
    assert client.get("/session").json()["is_authenticated"] is False


def test_logout_endpoint_and_notifications(client):
    _sign_in(client)
    client.get("/session/notifications")

    resp = client.post("/session/logout", json={"reason": "Signed out from menu"})

    assert resp.json() == {"success": True, "location": "/"}
    assert client.get("/session").json()["is_authenticated"] is False
    messages = [n["message"] for n in client.get("/session/notifications").json()]
    assert messages == ["Signed out from menu"]
    assert client.get("/session/notifications").json() == []


def test_otp_without_pending_login_is_400(client):
    assert client.post("/auth/otp", json={"otp": "1"}).status_code == 400


def test_session_survives_restart(config, remote):
    scheduler = FakeScheduler()
    first = build_runtime(config, scheduler=scheduler, transport=remote["transport"])
    with TestClient(create_session_app(first)) as c:
        _sign_in(c)

    second = build_runtime(config, scheduler=FakeScheduler(), transport=remote["transport"])
    with TestClient(create_session_app(second)) as c:
        body = c.get("/session").json()

    assert body["is_authenticated"] is True
    assert body["user_email"] == "a@x.com"
