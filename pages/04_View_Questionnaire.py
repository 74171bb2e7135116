"""Read-only preview of a questionnaire as respondents would see it."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lib.api_client import AssessmentApiClient, SessionExpiredError
from lib.config import get_api_settings, setup_logging
from lib.editor_service import EditorLoadError, load_for_view
from lib.questionnaire_tree import QuestionnaireDraft, total_questions
from lib.questionnaire_utils import EDITOR_SELECTED_STATE_KEY
from lib.session import end_session, require_session
from lib.ui_theme import apply_app_theme, page_header, status_badge

LIST_PAGE = "pages/01_My_Questionnaires.py"
PREVIEW_PLACEHOLDER = "Preview (answers disabled)"


def get_client() -> AssessmentApiClient:
    """Return an API client for the signed-in user."""

    return require_session().api_client(get_api_settings())


def selected_questionnaire_id() -> Optional[int]:
    raw = st.query_params.get("id") or st.session_state.get(EDITOR_SELECTED_STATE_KEY)
    try:
        return int(raw) if raw not in (None, "") else None
    except (TypeError, ValueError):
        return None


def preview_outline(draft: QuestionnaireDraft) -> List[Tuple[str, List[str]]]:
    """Return numbered section titles with their numbered question texts.

    Sections and questions are listed in stored order.
    """

    outline: List[Tuple[str, List[str]]] = []
    sections = sorted(draft.sections, key=lambda section: section.order)
    for section_number, section in enumerate(sections, start=1):
        questions = sorted(section.questions, key=lambda question: question.order)
        outline.append(
            (
                f"{section_number}. {section.name}",
                [
                    f"{section_number}.{question_number} {question.text}"
                    for question_number, question in enumerate(questions, start=1)
                ],
            )
        )
    return outline


def load_preview(client: AssessmentApiClient, questionnaire_id: int) -> Optional[QuestionnaireDraft]:
    """Return the questionnaire to preview or ``None`` after reporting why not."""

    try:
        return load_for_view(client, questionnaire_id)
    except SessionExpiredError:
        end_session()
        st.error("Your session has expired. Please sign in again.")
    except EditorLoadError as exc:
        st.error(str(exc))
    return None


def main() -> None:
    """Render the questionnaire preview."""

    setup_logging()
    apply_app_theme(page_title="View questionnaire", page_icon="👁️")
    st.page_link(LIST_PAGE, label="Back to my questionnaires", icon="⬅️")

    questionnaire_id = selected_questionnaire_id()
    if questionnaire_id is None:
        st.info("Choose a questionnaire to view from the list page.")
        return

    draft = load_preview(get_client(), questionnaire_id)
    if draft is None:
        return

    page_header(draft.name, draft.description or None, icon="👁️")
    count = total_questions(draft)
    st.markdown(
        f"{status_badge(draft.status)} · {count} question(s) · administrator preview",
        unsafe_allow_html=True,
    )
    st.progress(0, text=f"Progress 0/{count} questions")

    for title, questions in preview_outline(draft):
        st.subheader(title, divider="gray")
        if not questions:
            st.caption("This skill group has no questions.")
        for index, label in enumerate(questions):
            with st.container(border=True):
                st.markdown(f"**{label}**")
                st.selectbox(
                    "Answer",
                    options=[PREVIEW_PLACEHOLDER],
                    disabled=True,
                    key=f"preview_{questionnaire_id}_{title}_{index}",
                    label_visibility="collapsed",
                )


if __name__ == "__main__":
    main()
