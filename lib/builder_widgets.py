"""Streamlit widgets rendering the section/question builder for a draft."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import streamlit as st

from lib import questionnaire_tree as tree
from lib.questionnaire_tree import QuestionnaireDraft, Section

UNSELECTED_LABEL = "(no catalog reference)"


def render_summary(draft: QuestionnaireDraft) -> None:
    """Show the derived section/question counts."""

    col_groups, col_questions = st.columns(2)
    col_groups.metric("Named skill groups", tree.total_named_sections(draft))
    col_questions.metric("Questions", tree.total_questions(draft))


def _skill_group_selector(
    section: Section,
    skill_groups: Sequence[Tuple[str, str]],
    key: str,
) -> Optional[str]:
    labels: Dict[str, str] = {code: f"{code} · {description}" for code, description in skill_groups}
    options: List[str] = ["", *labels.keys()]
    current = section.skill_group_code or ""
    if current and current not in labels:
        options.append(current)
        labels[current] = current
    selected = st.selectbox(
        "Catalog reference",
        options=options,
        index=options.index(current),
        key=key,
        format_func=lambda code: labels.get(code, UNSELECTED_LABEL) if code else UNSELECTED_LABEL,
        help="Optional link to the shared skill-group catalog.",
    )
    return selected or None


def _render_questions(
    draft: QuestionnaireDraft, section: Section, prefix: str
) -> Tuple[QuestionnaireDraft, bool]:
    """Render the questions of ``section``; the flag reports a structural change."""

    structural = False
    if not section.questions:
        st.caption("No questions yet. Empty groups cannot be saved.")

    last_index = len(section.questions) - 1
    for index, question in enumerate(section.questions):
        key = f"{prefix}_q_{question.temp_id}"
        col_text, col_obs, col_actions = st.columns([4, 3, 1])
        with col_text:
            text = st.text_input(
                f"Question {index + 1}",
                value=question.text,
                key=f"{key}_text",
                placeholder="e.g. Makes eye contact?",
            )
        with col_obs:
            observations = st.text_input(
                "Observations",
                value=question.observations,
                key=f"{key}_obs",
            )
        if text != question.text:
            draft = tree.set_question_text(draft, section.temp_id, question.temp_id, text)
        if observations != question.observations:
            draft = tree.set_question_observations(
                draft, section.temp_id, question.temp_id, observations
            )
        with col_actions:
            if st.button("↑", key=f"{key}_up", disabled=index == 0):
                draft = tree.move_question(draft, section.temp_id, question.temp_id, -1)
                structural = True
            if st.button("↓", key=f"{key}_down", disabled=index == last_index):
                draft = tree.move_question(draft, section.temp_id, question.temp_id, 1)
                structural = True
            if st.button("🗑️", key=f"{key}_delete", help="Delete question"):
                draft = tree.delete_question(draft, section.temp_id, question.temp_id)
                structural = True

    if st.button("Add question", key=f"{prefix}_s_{section.temp_id}_add_question"):
        draft = tree.add_question(draft, section.temp_id)
        structural = True
    return draft, structural


def render_builder(
    draft: QuestionnaireDraft,
    skill_groups: Sequence[Tuple[str, str]],
    prefix: str,
) -> Tuple[QuestionnaireDraft, bool]:
    """Render the builder for ``draft`` and return ``(edited_draft, structural)``.

    ``structural`` is ``True`` after an add, delete, move or expand action; the
    caller stores the draft and reruns so widgets are rebuilt from the new tree.
    """

    structural = False
    header_col, action_col = st.columns([3, 1])
    header_col.markdown("#### Questionnaire builder")
    if action_col.button("New skill group", key=f"{prefix}_add_section", type="primary"):
        draft = tree.add_section(draft)
        structural = True

    if not draft.sections:
        st.info("No skill groups yet. Add one to start writing questions.")

    sections = draft.sections
    last_index = len(sections) - 1
    for index, section in enumerate(sections):
        key = f"{prefix}_s_{section.temp_id}"
        with st.container(border=True):
            col_toggle, col_name, col_catalog, col_actions = st.columns([0.5, 4, 3, 1.5])
            with col_toggle:
                if st.button("▾" if section.is_expanded else "▸", key=f"{key}_toggle"):
                    draft = tree.toggle_section(draft, section.temp_id)
                    structural = True
            with col_name:
                name = st.text_input(
                    f"Skill group {index + 1}",
                    value=section.name,
                    key=f"{key}_name",
                    placeholder="e.g. Communication",
                )
            if name != section.name:
                draft = tree.rename_section(draft, section.temp_id, name)
            with col_catalog:
                code = _skill_group_selector(section, skill_groups, f"{key}_catalog")
            if code != section.skill_group_code:
                draft = tree.set_section_skill_group(draft, section.temp_id, code)
            with col_actions:
                up_col, down_col, delete_col = st.columns(3)
                if up_col.button("↑", key=f"{key}_up", disabled=index == 0):
                    draft = tree.move_section(draft, section.temp_id, -1)
                    structural = True
                if down_col.button("↓", key=f"{key}_down", disabled=index == last_index):
                    draft = tree.move_section(draft, section.temp_id, 1)
                    structural = True
                if delete_col.button("🗑️", key=f"{key}_delete", help="Delete skill group"):
                    draft = tree.delete_section(draft, section.temp_id)
                    structural = True

            if section.is_expanded:
                current = next(
                    (item for item in draft.sections if item.temp_id == section.temp_id),
                    None,
                )
                if current is not None:
                    draft, changed = _render_questions(draft, current, prefix)
                    structural = structural or changed
            else:
                st.caption(f"{len(section.questions)} question(s) hidden.")

    return draft, structural
