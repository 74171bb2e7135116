"""Utilities for interacting with the assessment platform REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from lib.schema_defaults import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionExpiredError(ApiError):
    """Raised on ``401`` responses; the session must be discarded."""


@dataclass
class AssessmentApiClient:
    """Questionnaire API wrapper sending JSON with a bearer token."""

    token: Optional[str] = None
    base_url: str = DEFAULT_API_BASE_URL
    timeout: float = DEFAULT_API_TIMEOUT

    def _headers(self) -> Dict[str, str]:
        """Build request headers for the backend."""

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Send a request and return the decoded JSON body."""

        url = self._url(endpoint)
        logger.debug("%s %s", method, url)
        try:
            response = requests.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiError(f"Could not reach {url}: {exc}") from exc

        if response.status_code == 401:
            raise SessionExpiredError("Session expired or invalid token.", status_code=401)
        if not response.ok:
            raise ApiError(
                f"API error {response.status_code} for {method} {endpoint}: {response.reason}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(f"Invalid JSON returned by {endpoint}.", response.status_code) from exc

    def list_skill_groups(self) -> List[Dict[str, Any]]:
        """Return the skill-group catalog as ``{code, description}`` mappings."""

        payload = self._request("GET", "/questionnaire/list-groups") or {}
        groups = payload.get("skillGroups", []) if isinstance(payload, dict) else payload
        return list(groups or [])

    def list_questionnaires(self) -> Dict[str, Any]:
        return self._request("GET", "/questionnaire/list-forms") or {}

    def get_questionnaire(self, questionnaire_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/questionnaire/get-form/{questionnaire_id}")

    def create_questionnaire(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/questionnaire/create-form", payload)

    def update_questionnaire(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", "/questionnaire/update-form", payload)

    def delete_questionnaire(self, questionnaire_id: int) -> bool:
        return bool(self._request("DELETE", f"/questionnaire/delete-form/{questionnaire_id}"))

    def list_default_answers(self, questionnaire_id: int) -> List[Dict[str, Any]]:
        payload = self._request("GET", f"/questionnaire/list-default-answers/{questionnaire_id}")
        return list(payload or [])

    def create_default_answer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/questionnaire/create-default-answer", payload)

    def delete_default_answer(self, answer_id: int) -> bool:
        return bool(self._request("DELETE", f"/questionnaire/delete-default-answer/{answer_id}"))


__all__ = ["ApiError", "AssessmentApiClient", "SessionExpiredError"]
