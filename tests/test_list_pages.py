"""Tests for the questionnaire list page and the home overview table."""

from __future__ import annotations

import importlib
import importlib.util
from pathlib import Path
import sys

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

MODULE_PATH = REPO_ROOT / "pages" / "01_My_Questionnaires.py"
SPEC = importlib.util.spec_from_file_location("list_page_module", MODULE_PATH)
if SPEC is None or SPEC.loader is None:  # pragma: no cover - defensive
    raise RuntimeError("Could not load the list page for testing.")
LIST_PAGE = importlib.util.module_from_spec(SPEC)
SPEC.loader.exec_module(LIST_PAGE)

home = importlib.import_module("Home")
api_client = importlib.import_module("lib.api_client")


QUESTIONNAIRES = [
    {"id": 1, "name": "Social Skills", "description": "", "status": "Draft", "createdAt": "2024-05-01"},
    {"id": 2, "name": "Motor", "description": "Fine motor", "status": "Published", "createdAt": "2024-06-01"},
]


class DummyClient:
    def __init__(self, error=None) -> None:
        self.error = error
        self.calls = []

    def update_questionnaire(self, payload):
        self.calls.append(("update", payload))
        if self.error is not None:
            raise self.error
        return payload

    def delete_questionnaire(self, questionnaire_id):
        self.calls.append(("delete", questionnaire_id))
        return True


def test_questionnaires_to_frame_uses_display_columns() -> None:
    frame = LIST_PAGE.questionnaires_to_frame(QUESTIONNAIRES)

    assert list(frame.columns) == list(LIST_PAGE.TABLE_COLUMNS)
    assert frame["ID"].tolist() == [1, 2]
    assert frame["Status"].tolist() == ["Draft", "Published"]


def test_run_action_publish_sends_status_update(monkeypatch) -> None:
    client = DummyClient()
    monkeypatch.setattr(LIST_PAGE, "get_client", lambda: client)

    assert LIST_PAGE.run_action("publish", 1) is True
    assert client.calls == [("update", {"id": 1, "status": "Published"})]


def test_run_action_session_expiry_ends_session(monkeypatch) -> None:
    client = DummyClient(error=api_client.SessionExpiredError("expired", 401))
    ended = []
    errors = []
    monkeypatch.setattr(LIST_PAGE, "get_client", lambda: client)
    monkeypatch.setattr(LIST_PAGE, "end_session", lambda: ended.append(True))
    monkeypatch.setattr(LIST_PAGE.st, "error", lambda message: errors.append(message))

    assert LIST_PAGE.run_action("archive", 2) is False
    assert ended == [True]
    assert errors


def test_recent_questionnaires_sorts_newest_first() -> None:
    frame = home.recent_questionnaires(QUESTIONNAIRES)

    assert frame["Name"].tolist() == ["Motor", "Social Skills"]


def test_recent_questionnaires_empty() -> None:
    assert home.recent_questionnaires([]).empty


def test_delete_requires_draft_and_confirmation() -> None:
    draft, published = QUESTIONNAIRES

    assert LIST_PAGE.delete_allowed(draft, confirmed=True)
    assert not LIST_PAGE.delete_allowed(draft, confirmed=False)
    assert not LIST_PAGE.delete_allowed(published, confirmed=True)
