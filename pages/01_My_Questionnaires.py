"""List of questionnaires with publish, archive, edit and delete actions."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lib import editor_service
from lib.api_client import ApiError, AssessmentApiClient, SessionExpiredError
from lib.config import get_api_settings, setup_logging
from lib.questionnaire_utils import (
    ALL_STATUSES,
    EDITOR_SELECTED_STATE_KEY,
    LIST_FEEDBACK_STATE_KEY,
    can_archive,
    can_delete,
    can_publish,
    filter_questionnaires,
    normalize_questionnaires,
    status_label,
)
from lib.schema_defaults import QuestionnaireStatus
from lib.session import end_session, require_session
from lib.ui_theme import apply_app_theme, page_header

TABLE_COLUMNS = ("ID", "Name", "Description", "Status", "Created at")
SELECTED_STATE_KEY = "list_selected_questionnaire"
EDIT_PAGE = "pages/03_Edit_Questionnaire.py"
VIEW_PAGE = "pages/04_View_Questionnaire.py"
CREATE_PAGE = "pages/02_Create_Questionnaire.py"


def get_client() -> AssessmentApiClient:
    """Return an API client for the signed-in user."""

    return require_session().api_client(get_api_settings())


def load_questionnaires(client: AssessmentApiClient) -> Optional[List[Dict[str, Any]]]:
    """Return the normalised questionnaire list or ``None`` when loading failed."""

    try:
        payload = client.list_questionnaires()
    except SessionExpiredError:
        end_session()
        st.error("Your session has expired. Please sign in again.")
        return None
    except ApiError as exc:
        st.error(f"Could not load questionnaires: {exc}")
        return None
    return normalize_questionnaires(payload)


def questionnaires_to_frame(questionnaires: List[Dict[str, Any]]) -> pd.DataFrame:
    """Return a display table for ``questionnaires``."""

    rows = [
        {
            "ID": entry["id"],
            "Name": entry["name"],
            "Description": entry.get("description", ""),
            "Status": status_label(entry["status"]),
            "Created at": entry.get("createdAt", ""),
        }
        for entry in questionnaires
    ]
    return pd.DataFrame(rows, columns=list(TABLE_COLUMNS))


def run_action(action: str, questionnaire_id: int) -> bool:
    """Run a list action against the backend, reporting failures to the user."""

    client = get_client()
    try:
        if action == "publish":
            editor_service.publish(client, questionnaire_id)
        elif action == "archive":
            editor_service.archive(client, questionnaire_id)
        elif action == "delete":
            editor_service.delete(client, questionnaire_id)
        else:
            raise ValueError(f"Unknown action: {action}")
    except SessionExpiredError:
        end_session()
        st.error("Your session has expired. Please sign in again.")
        return False
    except ApiError as exc:
        st.error(f"Could not {action} questionnaire {questionnaire_id}: {exc}")
        return False
    return True


def delete_allowed(entry: Dict[str, Any], confirmed: bool) -> bool:
    """Deleting needs a draft and an explicit confirmation."""

    return can_delete(entry) and confirmed


def _open_page(page: str, questionnaire_id: int) -> None:
    st.session_state[EDITOR_SELECTED_STATE_KEY] = questionnaire_id
    st.query_params["id"] = str(questionnaire_id)
    st.switch_page(page)


def show_feedback() -> None:
    """Display and clear the message left by the last action."""

    message = st.session_state.pop(LIST_FEEDBACK_STATE_KEY, None)
    if message:
        st.success(message)


def main() -> None:
    """Render the questionnaire list."""

    setup_logging()
    apply_app_theme(page_title="My questionnaires", page_icon="📋")
    page_header("My questionnaires", "Manage, publish and archive questionnaires.", icon="📋")
    show_feedback()

    client = get_client()
    questionnaires = load_questionnaires(client)
    if questionnaires is None:
        return

    col_search, col_status, col_new = st.columns([3, 2, 1])
    search = col_search.text_input("Search", placeholder="Name or description")
    status_options = [ALL_STATUSES, *(status.value for status in QuestionnaireStatus)]
    status_filter = col_status.selectbox(
        "Status",
        options=status_options,
        format_func=lambda value: "All" if value == ALL_STATUSES else status_label(value),
    )
    with col_new:
        st.page_link(CREATE_PAGE, label="New questionnaire", icon="➕")

    visible = filter_questionnaires(questionnaires, search, status_filter)
    if not visible:
        if search or status_filter != ALL_STATUSES:
            st.info("No questionnaires match the current filters.")
        else:
            st.info("No questionnaires yet. Create your first one.")
        return

    table_df = questionnaires_to_frame(visible)
    table_df.insert(0, "Select", False)
    selected_id = st.session_state.get(SELECTED_STATE_KEY)
    if selected_id is not None:
        table_df.loc[table_df["ID"] == selected_id, "Select"] = True

    edited_df = st.data_editor(
        table_df,
        hide_index=True,
        num_rows="fixed",
        key="questionnaire_table",
        column_config={
            "Select": st.column_config.CheckboxColumn("Select", help="Choose a questionnaire."),
            **{column: st.column_config.Column(column, disabled=True) for column in TABLE_COLUMNS},
        },
    )

    selected_rows = edited_df.loc[edited_df["Select"].astype(bool)]
    if selected_rows.empty:
        st.caption("Select a questionnaire to see the available actions.")
        return
    if len(selected_rows) > 1:
        st.warning("Select only one questionnaire at a time.")
        return

    candidate_id = int(selected_rows.iloc[0]["ID"])
    st.session_state[SELECTED_STATE_KEY] = candidate_id
    entry = next(item for item in visible if item["id"] == candidate_id)

    col_view, col_edit, col_publish, col_archive, col_delete = st.columns(5)
    if col_view.button("View", use_container_width=True):
        _open_page(VIEW_PAGE, candidate_id)
    if col_edit.button("Edit", use_container_width=True):
        _open_page(EDIT_PAGE, candidate_id)
    if col_publish.button("Publish", disabled=not can_publish(entry), use_container_width=True):
        if run_action("publish", candidate_id):
            st.session_state[LIST_FEEDBACK_STATE_KEY] = "Questionnaire published."
            st.rerun()
    if col_archive.button("Archive", disabled=not can_archive(entry), use_container_width=True):
        if run_action("archive", candidate_id):
            st.session_state[LIST_FEEDBACK_STATE_KEY] = "Questionnaire archived."
            st.rerun()
    with col_delete:
        confirmed = st.checkbox(
            "Confirm deletion",
            key=f"confirm_delete_{candidate_id}",
            disabled=not can_delete(entry),
        )
        if st.button(
            "Delete",
            disabled=not delete_allowed(entry, confirmed),
            use_container_width=True,
        ):
            if run_action("delete", candidate_id):
                st.session_state.pop(SELECTED_STATE_KEY, None)
                st.session_state[LIST_FEEDBACK_STATE_KEY] = "Questionnaire deleted."
                st.rerun()


if __name__ == "__main__":
    main()
