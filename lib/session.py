"""Explicit authenticated session passed to the screens that need it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import requests
import streamlit as st

from lib.api_client import ApiError, AssessmentApiClient

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "auth_session"
ADMIN_ROLE = "Administrador"


def _parse_expiration(value: Any) -> datetime:
    """Return a timezone-aware expiration timestamp."""

    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    full_name: str
    email: str
    role: str
    token: str
    expiration: datetime

    @classmethod
    def from_login_response(cls, payload: Mapping[str, Any], role: str) -> "AuthSession":
        """Build a session from the backend login response and resolved role."""

        user = payload.get("user") or {}
        return cls(
            user_id=str(user.get("id", "")),
            full_name=str(user.get("fullName", "")),
            email=str(user.get("email", "")),
            role=role,
            token=str(payload["token"]),
            expiration=_parse_expiration(payload["expiration"]),
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        current = now or datetime.now(timezone.utc)
        return self.expiration <= current

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def api_client(self, settings: Mapping[str, Any]) -> AssessmentApiClient:
        """Return an API client authenticated with this session's token."""

        return AssessmentApiClient(
            token=self.token,
            base_url=settings["base_url"],
            timeout=settings["timeout"],
        )


def login(settings: Mapping[str, Any], email: str, password: str) -> AuthSession:
    """Authenticate against the backend and return a new session.

    Raises :class:`ApiError` when the credentials are rejected or the
    backend cannot be reached.
    """

    auth_url = settings["auth_url"]
    timeout = settings["timeout"]
    try:
        response = requests.post(
            f"{auth_url}/login",
            json={"email": email, "password": password},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise ApiError(f"Could not reach the authentication service: {exc}") from exc
    if not response.ok:
        logger.warning("Login rejected for %s with status %s", email, response.status_code)
        raise ApiError("Invalid email or password.", status_code=response.status_code)
    try:
        payload = response.json()
    except ValueError as exc:
        raise ApiError("The authentication service returned an invalid response.") from exc
    if not isinstance(payload, dict):
        raise ApiError("The authentication service returned an invalid response.")

    try:
        session = AuthSession.from_login_response(payload, role="")
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        logger.error("Incomplete login response for %s: %s", email, exc)
        raise ApiError("The authentication service returned an incomplete response.") from exc

    role = ""
    try:
        role_response = requests.get(
            f"{auth_url}/{session.user_id}/role",
            headers={"Authorization": f"Bearer {session.token}"},
            timeout=timeout,
        )
        role_response.raise_for_status()
        role_payload = role_response.json()
        role = str((role_payload.get("data") or {}).get("role") or role_payload.get("role") or "")
    except (requests.RequestException, ValueError, AttributeError) as exc:
        logger.warning("Could not resolve role for user %s: %s", session.user_id, exc)

    return replace(session, role=role)


def start_session(session: AuthSession) -> None:
    st.session_state[SESSION_STATE_KEY] = session


def end_session() -> None:
    """Discard the stored session (logout, expiry or a ``401`` response)."""

    st.session_state.pop(SESSION_STATE_KEY, None)


def current_session() -> Optional[AuthSession]:
    """Return the active session, dropping it first if it has expired."""

    session = st.session_state.get(SESSION_STATE_KEY)
    if not isinstance(session, AuthSession):
        return None
    if session.is_expired():
        logger.info("Session for %s expired", session.email)
        end_session()
        return None
    return session


def require_session() -> AuthSession:
    """Return the active session or stop the page with a login prompt."""

    session = current_session()
    if session is None:
        st.warning("Please sign in on the Home page to continue.")
        st.stop()
    return session


__all__ = [
    "AuthSession",
    "current_session",
    "end_session",
    "login",
    "require_session",
    "start_session",
]
