"""Streamlit home screen: sign-in and questionnaire overview."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

import pandas as pd
import streamlit as st

from lib.api_client import ApiError, SessionExpiredError
from lib.config import get_api_settings, setup_logging
from lib.questionnaire_utils import normalize_questionnaires, status_counts
from lib.schema_defaults import QuestionnaireStatus
from lib.session import current_session, end_session, login, start_session
from lib.ui_theme import apply_app_theme, page_header

logger = logging.getLogger(__name__)

RECENT_LIMIT = 5


def render_login() -> None:
    """Render the sign-in form and start a session on success."""

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if not submitted:
        return
    if not email.strip() or not password:
        st.error("Enter your email and password.")
        return
    try:
        session = login(get_api_settings(), email.strip(), password)
    except ApiError as exc:
        st.error(str(exc))
        return
    start_session(session)
    logger.info("Signed in as %s (%s)", session.email, session.role or "no role")
    st.rerun()


def recent_questionnaires(questionnaires: List[Dict[str, Any]]) -> pd.DataFrame:
    """Return the most recently created questionnaires as a table."""

    frame = pd.DataFrame(
        questionnaires, columns=["id", "name", "status", "createdAt"]
    ).rename(columns={"id": "ID", "name": "Name", "status": "Status", "createdAt": "Created at"})
    if frame.empty:
        return frame
    return frame.sort_values("Created at", ascending=False).head(RECENT_LIMIT)


def main() -> None:
    """Render the home screen."""

    setup_logging()
    apply_app_theme(page_title="Assessment editor", page_icon="🧩")
    page_header(
        "Behavioral assessment editor",
        "Author questionnaires and manage their default answers.",
        icon="🧩",
    )

    session = current_session()
    if session is None:
        render_login()
        return

    info_col, logout_col = st.columns([4, 1])
    info_col.caption(f"Signed in as {session.full_name or session.email} · {session.role or 'no role'}")
    if logout_col.button("Sign out"):
        end_session()
        st.rerun()

    client = session.api_client(get_api_settings())
    try:
        questionnaires = normalize_questionnaires(client.list_questionnaires())
    except SessionExpiredError:
        end_session()
        st.error("Your session has expired. Please sign in again.")
        return
    except ApiError as exc:
        logger.error("Could not load questionnaire overview: %s", exc)
        st.error("Could not load the questionnaire overview. Please try again.")
        return

    counts = status_counts(questionnaires)
    metric_cols = st.columns(4)
    metric_cols[0].metric("Questionnaires", len(questionnaires))
    metric_cols[1].metric("Drafts", counts[QuestionnaireStatus.DRAFT.value])
    metric_cols[2].metric("Published", counts[QuestionnaireStatus.PUBLISHED.value])
    metric_cols[3].metric("Archived", counts[QuestionnaireStatus.ARCHIVED.value])

    st.markdown("#### Recently created")
    recent = recent_questionnaires(questionnaires)
    if recent.empty:
        st.info("No questionnaires yet. Start by creating one.")
    else:
        st.dataframe(recent, hide_index=True, use_container_width=True)

    st.page_link("pages/01_My_Questionnaires.py", label="My questionnaires", icon="📋")
    st.page_link("pages/02_Create_Questionnaire.py", label="Create questionnaire", icon="📝")


if __name__ == "__main__":
    main()
