"""Tests for the authenticated session helpers."""

from __future__ import annotations

import importlib
import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

session = importlib.import_module("lib.session")
api_client = importlib.import_module("lib.api_client")

SETTINGS = {
    "base_url": "http://api.test/api",
    "auth_url": "http://api.test/api/Auth",
    "timeout": 4.0,
    "log_level": "INFO",
}

LOGIN_RESPONSE = {
    "token": "jwt-token",
    "expiration": "2030-01-01T00:00:00Z",
    "user": {"id": "u-1", "fullName": "Ana Ruiz", "email": "ana@example.com"},
}


def _response(status_code=200, body=None):
    return SimpleNamespace(
        status_code=status_code,
        ok=status_code < 400,
        json=lambda: json.loads(json.dumps(body)),
        raise_for_status=lambda: None,
    )


@pytest.fixture
def fake_st(monkeypatch):
    messages = []

    def stop():
        raise RuntimeError("stopped")

    stub = SimpleNamespace(
        session_state={},
        warning=lambda message: messages.append(message),
        stop=stop,
    )
    monkeypatch.setattr(session, "st", stub)
    stub.messages = messages
    return stub


def test_login_builds_session_with_role(monkeypatch) -> None:
    posted = {}

    def fake_post(url, json=None, timeout=None):
        posted.update(url=url, json=json, timeout=timeout)
        return _response(body=LOGIN_RESPONSE)

    def fake_get(url, headers=None, timeout=None):
        posted["role_url"] = url
        posted["role_headers"] = headers
        return _response(body={"data": {"role": session.ADMIN_ROLE}})

    monkeypatch.setattr(session.requests, "post", fake_post)
    monkeypatch.setattr(session.requests, "get", fake_get)

    result = session.login(SETTINGS, "ana@example.com", "secret")

    assert posted["url"] == "http://api.test/api/Auth/login"
    assert posted["json"] == {"email": "ana@example.com", "password": "secret"}
    assert posted["role_url"] == "http://api.test/api/Auth/u-1/role"
    assert posted["role_headers"] == {"Authorization": "Bearer jwt-token"}
    assert result.token == "jwt-token"
    assert result.full_name == "Ana Ruiz"
    assert result.is_admin
    assert result.expiration == datetime(2030, 1, 1, tzinfo=timezone.utc)


def test_login_rejected_raises_api_error(monkeypatch) -> None:
    monkeypatch.setattr(session.requests, "post", lambda url, json=None, timeout=None: _response(status_code=400))

    with pytest.raises(api_client.ApiError):
        session.login(SETTINGS, "ana@example.com", "wrong")


def test_role_lookup_failure_still_logs_in(monkeypatch) -> None:
    def failing_get(url, headers=None, timeout=None):
        raise session.requests.ConnectionError("offline")

    monkeypatch.setattr(session.requests, "post", lambda url, json=None, timeout=None: _response(body=LOGIN_RESPONSE))
    monkeypatch.setattr(session.requests, "get", failing_get)

    result = session.login(SETTINGS, "ana@example.com", "secret")

    assert result.role == ""
    assert not result.is_admin


def test_api_client_uses_session_token() -> None:
    auth = session.AuthSession.from_login_response(LOGIN_RESPONSE, "Docente")

    client = auth.api_client(SETTINGS)

    assert client.token == "jwt-token"
    assert client.base_url == SETTINGS["base_url"]
    assert client.timeout == 4.0


def test_current_session_drops_expired_session(fake_st) -> None:
    expired = session.AuthSession(
        user_id="u-1",
        full_name="Ana",
        email="ana@example.com",
        role="",
        token="t",
        expiration=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    session.start_session(expired)

    assert session.current_session() is None
    assert session.SESSION_STATE_KEY not in fake_st.session_state


def test_require_session_stops_without_login(fake_st) -> None:
    with pytest.raises(RuntimeError, match="stopped"):
        session.require_session()

    assert fake_st.messages


def test_end_session_removes_active_session(fake_st) -> None:
    active = session.AuthSession.from_login_response(LOGIN_RESPONSE, "")
    session.start_session(active)

    assert session.require_session() is active
    session.end_session()
    assert session.current_session() is None


@pytest.mark.parametrize(
    "body",
    [
        {"user": {"id": "u"}, "message": "ok"},
        {"token": "t", "user": {"id": "u"}},
        {"token": "t", "expiration": "not-a-date", "user": {"id": "u"}},
        ["unexpected"],
    ],
)
def test_login_with_incomplete_response_raises_api_error(monkeypatch, body) -> None:
    role_calls = []
    monkeypatch.setattr(session.requests, "post", lambda url, json=None, timeout=None: _response(body=body))
    monkeypatch.setattr(
        session.requests,
        "get",
        lambda url, headers=None, timeout=None: role_calls.append(url),
    )

    with pytest.raises(api_client.ApiError):
        session.login(SETTINGS, "ana@example.com", "secret")

    assert role_calls == []


def test_login_with_non_json_body_raises_api_error(monkeypatch) -> None:
    def not_json():
        raise ValueError("Expecting value")

    response = SimpleNamespace(status_code=200, ok=True, json=not_json)
    monkeypatch.setattr(session.requests, "post", lambda url, json=None, timeout=None: response)

    with pytest.raises(api_client.ApiError):
        session.login(SETTINGS, "ana@example.com", "secret")
