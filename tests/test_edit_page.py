"""Tests for the questionnaire edit page save handler."""

from __future__ import annotations

import importlib.util
from pathlib import Path
import sys

import streamlit as st

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

MODULE_PATH = REPO_ROOT / "pages" / "03_Edit_Questionnaire.py"
SPEC = importlib.util.spec_from_file_location("edit_page_module", MODULE_PATH)
if SPEC is None or SPEC.loader is None:  # pragma: no cover - defensive
    raise RuntimeError("Could not load the edit page for testing.")
EDIT = importlib.util.module_from_spec(SPEC)
SPEC.loader.exec_module(EDIT)

api_client = importlib.import_module("lib.api_client")
service = importlib.import_module("lib.editor_service")
tree = importlib.import_module("lib.questionnaire_tree")
defaults = importlib.import_module("lib.schema_defaults")
utils = importlib.import_module("lib.questionnaire_utils")
DefaultAnswer = importlib.import_module("lib.default_answers").DefaultAnswer


def _clear_session_state() -> None:
    """Remove all keys from Streamlit's session state."""

    for key in list(st.session_state.keys()):
        del st.session_state[key]


def _valid_draft():
    draft = tree.rename_draft(tree.new_draft(), "Social Skills")
    draft = tree.add_section(draft)
    section_id = draft.sections[0].temp_id
    draft = tree.rename_section(draft, section_id, "Communication")
    draft = tree.add_question(draft, section_id)
    question_id = draft.sections[0].questions[0].temp_id
    return tree.set_question_text(draft, section_id, question_id, "Makes eye contact?")


class DummyBackend:
    """Backend keeping default answers and rejecting the labels it is told to."""

    def __init__(self, reject_labels=()) -> None:
        self.reject_labels = set(reject_labels)
        self.answers = []
        self.created = []
        self.deleted = []

    def update_questionnaire(self, payload):
        return payload

    def list_default_answers(self, questionnaire_id):
        return list(self.answers)

    def create_default_answer(self, payload):
        if payload["label"] in self.reject_labels:
            raise api_client.ApiError("rejected", 400)
        record = {"id": 100 + len(self.created), **payload}
        self.created.append(payload["label"])
        self.answers.append(record)
        return record

    def delete_default_answer(self, answer_id):
        self.deleted.append(answer_id)
        self.answers = [row for row in self.answers if row["id"] != answer_id]
        return True


def test_failed_sync_keeps_ids_of_created_answers_for_the_retry(monkeypatch) -> None:
    _clear_session_state()
    backend = DummyBackend(reject_labels={"B"})
    monkeypatch.setattr(EDIT, "get_client", lambda: backend)
    state = service.EditorState(
        questionnaire_id=3,
        draft=_valid_draft(),
        default_answers=[DefaultAnswer(label="A"), DefaultAnswer(label="B")],
    )
    st.session_state[EDIT.EDIT_STATE_KEY] = state

    assert EDIT.handle_save(state) is False

    stored = st.session_state[EDIT.EDIT_STATE_KEY]
    assert [(answer.label, answer.id) for answer in stored.default_answers] == [("A", 100), ("B", 0)]
    assert stored.draft is state.draft
    assert st.session_state[EDIT.FEEDBACK_STATE_KEY].startswith(defaults.PARTIAL_SYNC_ERROR)

    backend.reject_labels.clear()
    assert EDIT.handle_save(stored) is True

    assert backend.created == ["A", "B"]
    assert backend.deleted == []
    assert EDIT.EDIT_STATE_KEY not in st.session_state
    assert st.session_state[utils.LIST_FEEDBACK_STATE_KEY]


def test_save_flag_is_cleared_after_the_save_run(monkeypatch) -> None:
    _clear_session_state()
    monkeypatch.setattr(EDIT, "get_client", lambda: DummyBackend())
    state = service.EditorState(questionnaire_id=3, draft=tree.new_draft())

    EDIT.request_save()
    assert st.session_state[EDIT.SAVING_STATE_KEY] is True

    assert EDIT.handle_save(state) is False

    assert st.session_state[EDIT.SAVING_STATE_KEY] is False
    assert st.session_state[EDIT.FEEDBACK_STATE_KEY] == defaults.NAME_REQUIRED
