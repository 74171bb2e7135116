"""Page for authoring a new questionnaire."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lib.api_client import ApiError, AssessmentApiClient, SessionExpiredError
from lib.builder_widgets import render_builder, render_summary
from lib.config import get_api_settings, setup_logging
from lib.editor_service import load_skill_groups, save_new
from lib.questionnaire_tree import QuestionnaireDraft, describe_draft, new_draft, rename_draft
from lib.session import end_session, require_session
from lib.ui_theme import apply_app_theme, page_header, section_card


DRAFT_STATE_KEY = "create_draft"
SAVING_STATE_KEY = "create_saving"
FEEDBACK_STATE_KEY = "create_feedback"
CATALOG_STATE_KEY = "skill_group_catalog"
WIDGET_PREFIX = "create"


def get_client() -> AssessmentApiClient:
    """Return an API client for the signed-in user."""

    return require_session().api_client(get_api_settings())


def get_draft() -> QuestionnaireDraft:
    draft = st.session_state.get(DRAFT_STATE_KEY)
    if not isinstance(draft, QuestionnaireDraft):
        draft = new_draft()
        st.session_state[DRAFT_STATE_KEY] = draft
    return draft


def get_skill_groups(client: AssessmentApiClient) -> List[Tuple[str, str]]:
    """Return the cached skill-group catalog, loading it on first use."""

    cached = st.session_state.get(CATALOG_STATE_KEY)
    if isinstance(cached, list):
        return cached
    try:
        groups = load_skill_groups(client)
    except SessionExpiredError:
        end_session()
        st.error("Your session has expired. Please sign in again.")
        st.stop()
    except ApiError:
        st.warning("Could not load the skill-group catalog. Catalog references are unavailable.")
        return []
    st.session_state[CATALOG_STATE_KEY] = groups
    return groups


def request_save() -> None:
    """Button callback: mark a save as in flight before the next run starts."""

    st.session_state[SAVING_STATE_KEY] = True


def show_feedback() -> None:
    """Display and clear the message left by the last save."""

    feedback = st.session_state.pop(FEEDBACK_STATE_KEY, None)
    if not feedback:
        return
    kind, message = feedback
    if kind == "success":
        st.success(message)
    else:
        st.error(message)


def handle_save(draft: QuestionnaireDraft) -> bool:
    """Validate and create ``draft``, then clear the in-flight flag.

    The result is left under ``FEEDBACK_STATE_KEY`` for the next run; the
    editor is reset on success.
    """

    try:
        outcome = save_new(get_client(), draft)
    except SessionExpiredError:
        end_session()
        st.session_state[FEEDBACK_STATE_KEY] = ("error", "Your session has expired. Please sign in again.")
        return False
    finally:
        st.session_state[SAVING_STATE_KEY] = False

    if not outcome.ok:
        st.session_state[FEEDBACK_STATE_KEY] = ("error", outcome.message)
        return False

    st.session_state[FEEDBACK_STATE_KEY] = ("success", outcome.message)
    st.session_state[DRAFT_STATE_KEY] = new_draft()
    for key in (f"{WIDGET_PREFIX}_name", f"{WIDGET_PREFIX}_description"):
        st.session_state.pop(key, None)
    return True


def main() -> None:
    """Render the questionnaire creation page."""

    setup_logging()
    apply_app_theme(page_title="Create questionnaire", page_icon="📝")
    page_header(
        "Create questionnaire",
        "Build a new behavioral assessment questionnaire.",
        icon="📝",
    )
    show_feedback()

    client = get_client()
    skill_groups = get_skill_groups(client)
    draft = get_draft()

    with section_card("Questionnaire settings") as card:
        col_name, col_description = card.columns(2)
        with col_name:
            name = st.text_input(
                "Questionnaire name*",
                value=draft.name,
                key=f"{WIDGET_PREFIX}_name",
                placeholder="e.g. Social Communication Assessment",
            )
        with col_description:
            description = st.text_input(
                "Description (optional)",
                value=draft.description,
                key=f"{WIDGET_PREFIX}_description",
            )
    if name != draft.name:
        draft = rename_draft(draft, name)
    if description != draft.description:
        draft = describe_draft(draft, description)

    draft, structural = render_builder(draft, skill_groups, WIDGET_PREFIX)
    st.session_state[DRAFT_STATE_KEY] = draft
    if structural:
        st.rerun()

    render_summary(draft)

    saving = bool(st.session_state.get(SAVING_STATE_KEY))
    st.button(
        "Saving..." if saving else "Save questionnaire",
        type="primary",
        disabled=saving,
        on_click=request_save,
    )
    if saving:
        handle_save(draft)
        st.rerun()


if __name__ == "__main__":
    main()
