"""
tests/test_auth.py
"""
from __future__ import annotations

import json

import httpx
import pytest

from common.errors import AuthError
from conftest import run
from services.auth_service import AuthClient

USER = {"id": "u1", "email": "admin@example.com", "app_metadata": {"provider": "email"}}


def _client(handler, **kw) -> AuthClient:
    kw.setdefault("admin_emails", {"admin@example.com"})
    return AuthClient("https://store.test/auth/v1", "anon-key", transport=httpx.MockTransport(handler), **kw)


def test_sign_in_with_password():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"access_token": "jwt", "refresh_token": "r", "expires_in": 3600, "user": USER})

    session = run(_client(handler).sign_in("admin@example.com", "secret1"))

    assert seen["url"] == "https://store.test/auth/v1/token?grant_type=password"
    assert seen["body"] == {"email": "admin@example.com", "password": "secret1"}
    assert session.access_token == "jwt"
    assert session.user.is_admin is True


def test_bad_credentials_raise_auth_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "invalid_grant", "error_description": "Invalid login credentials"})

    with pytest.raises(AuthError) as exc:
        run(_client(handler).sign_in("x@example.com", "wrongpw"))
    assert exc.value.status_code == 401
    assert exc.value.message == "Invalid login credentials"


def test_sign_up_without_session_returns_user_only():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/signup"
        return httpx.Response(200, json={"id": "u2", "email": "new@example.com", "app_metadata": {}})

    session = run(_client(handler).sign_up("new@example.com", "secret1"))
    assert session.access_token is None
    assert session.user.id == "u2"
    assert session.user.is_admin is False


def test_admin_by_role():
    client = _client(lambda r: httpx.Response(500), admin_role="admin", admin_emails=set())
    assert client.is_admin({"email": "x@example.com", "app_metadata": {"role": "admin"}})
    assert not client.is_admin({"email": "x@example.com", "app_metadata": {"role": "editor"}})
    assert not client.is_admin({"email": None})


def test_get_user_and_sign_out_send_bearer():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.headers["authorization"]))
        if request.url.path.endswith("/user"):
            return httpx.Response(200, json=USER)
        return httpx.Response(204)

    client = _client(handler)
    user = run(client.get_user("jwt"))
    run(client.sign_out("jwt"))

    assert user.email == "admin@example.com"
    assert seen == [
        ("GET", "/auth/v1/user", "Bearer jwt"),
        ("POST", "/auth/v1/logout", "Bearer jwt"),
    ]


def test_provider_down_is_503():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timeout", request=request)

    with pytest.raises(AuthError) as exc:
        run(_client(handler).get_user("jwt"))
    assert exc.value.status_code == 503
