"""Page for editing an existing questionnaire and its default answers."""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lib.api_client import ApiError, AssessmentApiClient, SessionExpiredError
from lib.builder_widgets import render_builder, render_summary
from lib.config import get_api_settings, setup_logging
from lib.default_answers import add_option, remove_option
from lib.editor_service import (
    EditorLoadError,
    EditorState,
    load_for_edit,
    load_skill_groups,
    save_existing,
)
from lib.questionnaire_tree import describe_draft, rename_draft
from lib.questionnaire_utils import EDITOR_SELECTED_STATE_KEY, LIST_FEEDBACK_STATE_KEY
from lib.schema_defaults import DEFAULT_ANSWER_COLOR, answer_suggestions_list
from lib.session import end_session, require_session
from lib.ui_theme import answer_swatch, apply_app_theme, page_header, section_card, status_badge


EDIT_STATE_KEY = "edit_state"
SAVING_STATE_KEY = "edit_saving"
FEEDBACK_STATE_KEY = "edit_feedback"
CATALOG_STATE_KEY = "skill_group_catalog"
LIST_PAGE = "pages/01_My_Questionnaires.py"
WIDGET_PREFIX = "edit"


def get_client() -> AssessmentApiClient:
    """Return an API client for the signed-in user."""

    return require_session().api_client(get_api_settings())


def _session_expired() -> None:
    end_session()
    st.error("Your session has expired. Please sign in again.")
    st.stop()


def selected_questionnaire_id() -> Optional[int]:
    """Return the questionnaire to edit from the query string or session state."""

    raw = st.query_params.get("id") or st.session_state.get(EDITOR_SELECTED_STATE_KEY)
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


def get_skill_groups(client: AssessmentApiClient) -> List[Tuple[str, str]]:
    cached = st.session_state.get(CATALOG_STATE_KEY)
    if isinstance(cached, list):
        return cached
    try:
        groups = load_skill_groups(client)
    except SessionExpiredError:
        _session_expired()
    except ApiError:
        st.warning("Could not load the skill-group catalog. Catalog references are unavailable.")
        return []
    st.session_state[CATALOG_STATE_KEY] = groups
    return groups


def get_state(client: AssessmentApiClient, questionnaire_id: int) -> EditorState:
    """Return the editor state for ``questionnaire_id``, loading it on mount.

    A load failure stops the page; no partial tree is shown.
    """

    state = st.session_state.get(EDIT_STATE_KEY)
    if isinstance(state, EditorState) and state.questionnaire_id == questionnaire_id:
        return state
    try:
        state = load_for_edit(client, questionnaire_id)
    except SessionExpiredError:
        _session_expired()
    except EditorLoadError as exc:
        st.error(str(exc))
        st.stop()
    st.session_state[EDIT_STATE_KEY] = state
    return state


def request_save() -> None:
    """Button callback: mark a save as in flight before the next run starts."""

    st.session_state[SAVING_STATE_KEY] = True


def show_feedback() -> None:
    """Display and clear the message left by the last failed save."""

    message = st.session_state.pop(FEEDBACK_STATE_KEY, None)
    if message:
        st.error(message)


def handle_save(state: EditorState) -> bool:
    """Save ``state`` and reconcile default answers, then clear the in-flight flag.

    On failure the draft is kept and the default answers are replaced by the
    reconciled list, so answers created before the failure keep their ids.
    """

    try:
        outcome = save_existing(get_client(), state)
    except SessionExpiredError:
        end_session()
        st.session_state[FEEDBACK_STATE_KEY] = "Your session has expired. Please sign in again."
        return False
    finally:
        st.session_state[SAVING_STATE_KEY] = False

    if outcome.session_expired:
        end_session()
    if not outcome.ok:
        if outcome.default_answers is not None:
            st.session_state[EDIT_STATE_KEY] = replace(state, default_answers=outcome.default_answers)
        st.session_state[FEEDBACK_STATE_KEY] = outcome.message
        return False

    st.session_state.pop(EDIT_STATE_KEY, None)
    st.session_state[LIST_FEEDBACK_STATE_KEY] = outcome.message
    return True


def render_default_answers(state: EditorState) -> Tuple[EditorState, bool]:
    """Render the default answer list with add/remove controls."""

    changed = False
    options = state.default_answers
    if not options:
        st.caption("No default answers yet.")
    for index, option in enumerate(options):
        col_label, col_remove = st.columns([6, 1])
        suffix = " *(new)*" if option.is_new else ""
        col_label.markdown(answer_swatch(option.label, option.color) + suffix, unsafe_allow_html=True)
        if col_remove.button("Remove", key=f"{WIDGET_PREFIX}_answer_remove_{index}"):
            options = remove_option(options, index)
            changed = True

    with st.form(f"{WIDGET_PREFIX}_answer_form", clear_on_submit=True):
        col_text, col_color, col_submit = st.columns([4, 1, 1])
        label = col_text.text_input(
            "Answer label",
            placeholder="e.g. " + ", ".join(answer_suggestions_list()),
        )
        color = col_color.color_picker("Colour", value=DEFAULT_ANSWER_COLOR)
        if col_submit.form_submit_button("Add"):
            updated = add_option(options, state.questionnaire_id, label, color)
            changed = changed or len(updated) != len(options)
            options = updated

    if changed:
        state = replace(state, default_answers=options)
    return state, changed


def main() -> None:
    """Render the questionnaire edit page."""

    setup_logging()
    apply_app_theme(page_title="Edit questionnaire", page_icon="✏️")
    page_header(
        "Edit questionnaire",
        "Update the questionnaire structure and its default answers.",
        icon="✏️",
    )
    show_feedback()

    questionnaire_id = selected_questionnaire_id()
    if questionnaire_id is None:
        st.info("Choose a questionnaire to edit from the list page.")
        st.page_link(LIST_PAGE, label="My questionnaires", icon="📋")
        return

    client = get_client()
    skill_groups = get_skill_groups(client)
    state = get_state(client, questionnaire_id)
    draft = state.draft

    with section_card("Questionnaire settings") as card:
        card.markdown(
            f"Status: {status_badge(draft.status)}",
            unsafe_allow_html=True,
        )
        col_name, col_description = card.columns(2)
        with col_name:
            name = st.text_input(
                "Questionnaire name*",
                value=draft.name,
                key=f"{WIDGET_PREFIX}_{questionnaire_id}_name",
            )
        with col_description:
            description = st.text_input(
                "Description (optional)",
                value=draft.description,
                key=f"{WIDGET_PREFIX}_{questionnaire_id}_description",
            )
    if name != draft.name:
        draft = rename_draft(draft, name)
    if description != draft.description:
        draft = describe_draft(draft, description)

    with section_card("Default answers", "Answer options offered for every question.") as card:
        with card:
            state, answers_changed = render_default_answers(state)

    draft, structural = render_builder(draft, skill_groups, f"{WIDGET_PREFIX}_{questionnaire_id}")
    state = replace(state, draft=draft)
    st.session_state[EDIT_STATE_KEY] = state
    if structural or answers_changed:
        st.rerun()

    render_summary(draft)

    saving = bool(st.session_state.get(SAVING_STATE_KEY))
    st.button(
        "Saving..." if saving else "Update questionnaire",
        type="primary",
        disabled=saving,
        on_click=request_save,
    )
    if saving:
        if handle_save(state):
            st.switch_page(LIST_PAGE)
        st.rerun()


if __name__ == "__main__":
    main()
