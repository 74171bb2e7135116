"""Immutable questionnaire draft tree manipulated by the editor screens.

Every operation takes the current :class:`QuestionnaireDraft` and returns a new
one. Nodes that are not on the path to the edited element are reused as-is so
the UI can compare them by identity. Operations addressing an unknown
temporary identifier return the draft unchanged.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from lib.schema_defaults import QuestionnaireStatus


def new_temp_id() -> str:
    """Return a fresh client-side identifier for a tree node."""

    return uuid.uuid4().hex


@dataclass(frozen=True)
class Question:
    temp_id: str
    text: str = ""
    observations: str = ""
    order: int = 0
    id: Optional[int] = None


@dataclass(frozen=True)
class Section:
    temp_id: str
    name: str = ""
    questions: Tuple[Question, ...] = ()
    order: int = 0
    is_expanded: bool = True
    skill_group_code: Optional[str] = None
    id: Optional[int] = None


@dataclass(frozen=True)
class QuestionnaireDraft:
    name: str = ""
    description: str = ""
    sections: Tuple[Section, ...] = ()
    status: QuestionnaireStatus = field(default=QuestionnaireStatus.DRAFT)


_Node = TypeVar("_Node", Section, Question)


def new_draft() -> QuestionnaireDraft:
    """Return an empty draft ready for the create flow."""

    return QuestionnaireDraft()


def _next_order(siblings: Sequence[_Node]) -> int:
    """Return the order for a node appended after ``siblings``."""

    candidate = len(siblings)
    used = {node.order for node in siblings}
    if candidate in used:
        return max(used) + 1
    return candidate


def _replace_node(
    nodes: Tuple[_Node, ...],
    temp_id: str,
    update: Callable[[_Node], _Node],
) -> Tuple[_Node, ...]:
    """Return ``nodes`` with the node matching ``temp_id`` passed through ``update``.

    The original tuple is returned when no node matches.
    """

    for index, node in enumerate(nodes):
        if node.temp_id == temp_id:
            updated = update(node)
            if updated is node:
                return nodes
            return nodes[:index] + (updated,) + nodes[index + 1 :]
    return nodes


def _update_section(
    draft: QuestionnaireDraft,
    section_id: str,
    update: Callable[[Section], Section],
) -> QuestionnaireDraft:
    sections = _replace_node(draft.sections, section_id, update)
    if sections is draft.sections:
        return draft
    return replace(draft, sections=sections)


def _update_question(
    draft: QuestionnaireDraft,
    section_id: str,
    question_id: str,
    update: Callable[[Question], Question],
) -> QuestionnaireDraft:
    def apply(section: Section) -> Section:
        questions = _replace_node(section.questions, question_id, update)
        if questions is section.questions:
            return section
        return replace(section, questions=questions)

    return _update_section(draft, section_id, apply)


def _move(nodes: Tuple[_Node, ...], temp_id: str, offset: int) -> Tuple[_Node, ...]:
    """Swap the node ``temp_id`` with the neighbour ``offset`` places away."""

    index = next((i for i, node in enumerate(nodes) if node.temp_id == temp_id), None)
    if index is None:
        return nodes
    target = index + offset
    if offset == 0 or target < 0 or target >= len(nodes):
        return nodes
    reordered = list(nodes)
    reordered[index], reordered[target] = reordered[target], reordered[index]
    return tuple(
        node if node.order == position else replace(node, order=position)
        for position, node in enumerate(reordered)
    )


def rename_draft(draft: QuestionnaireDraft, name: str) -> QuestionnaireDraft:
    return replace(draft, name=name)


def describe_draft(draft: QuestionnaireDraft, description: str) -> QuestionnaireDraft:
    return replace(draft, description=description)


def add_section(draft: QuestionnaireDraft) -> QuestionnaireDraft:
    """Append an empty, expanded section."""

    section = Section(temp_id=new_temp_id(), order=_next_order(draft.sections))
    return replace(draft, sections=draft.sections + (section,))


def rename_section(draft: QuestionnaireDraft, section_id: str, name: str) -> QuestionnaireDraft:
    return _update_section(draft, section_id, lambda section: replace(section, name=name))


def set_section_skill_group(
    draft: QuestionnaireDraft, section_id: str, code: Optional[str]
) -> QuestionnaireDraft:
    """Attach (or clear) a skill-group catalog reference on a section."""

    return _update_section(
        draft,
        section_id,
        lambda section: replace(section, skill_group_code=code or None),
    )


def toggle_section(draft: QuestionnaireDraft, section_id: str) -> QuestionnaireDraft:
    return _update_section(
        draft,
        section_id,
        lambda section: replace(section, is_expanded=not section.is_expanded),
    )


def delete_section(draft: QuestionnaireDraft, section_id: str) -> QuestionnaireDraft:
    """Remove a section together with its questions."""

    sections = tuple(section for section in draft.sections if section.temp_id != section_id)
    if len(sections) == len(draft.sections):
        return draft
    return replace(draft, sections=sections)


def move_section(draft: QuestionnaireDraft, section_id: str, offset: int) -> QuestionnaireDraft:
    sections = _move(draft.sections, section_id, offset)
    if sections is draft.sections:
        return draft
    return replace(draft, sections=sections)


def add_question(draft: QuestionnaireDraft, section_id: str) -> QuestionnaireDraft:
    """Append an empty question to the section ``section_id``."""

    def apply(section: Section) -> Section:
        question = Question(temp_id=new_temp_id(), order=_next_order(section.questions))
        return replace(section, questions=section.questions + (question,))

    return _update_section(draft, section_id, apply)


def set_question_text(
    draft: QuestionnaireDraft, section_id: str, question_id: str, text: str
) -> QuestionnaireDraft:
    return _update_question(
        draft, section_id, question_id, lambda question: replace(question, text=text)
    )


def set_question_observations(
    draft: QuestionnaireDraft, section_id: str, question_id: str, observations: str
) -> QuestionnaireDraft:
    return _update_question(
        draft,
        section_id,
        question_id,
        lambda question: replace(question, observations=observations),
    )


def set_question_order(
    draft: QuestionnaireDraft, section_id: str, question_id: str, order: int
) -> QuestionnaireDraft:
    return _update_question(
        draft, section_id, question_id, lambda question: replace(question, order=int(order))
    )


def delete_question(
    draft: QuestionnaireDraft, section_id: str, question_id: str
) -> QuestionnaireDraft:
    def apply(section: Section) -> Section:
        questions = tuple(q for q in section.questions if q.temp_id != question_id)
        if len(questions) == len(section.questions):
            return section
        return replace(section, questions=questions)

    return _update_section(draft, section_id, apply)


def move_question(
    draft: QuestionnaireDraft, section_id: str, question_id: str, offset: int
) -> QuestionnaireDraft:
    def apply(section: Section) -> Section:
        questions = _move(section.questions, question_id, offset)
        if questions is section.questions:
            return section
        return replace(section, questions=questions)

    return _update_section(draft, section_id, apply)


def total_questions(draft: QuestionnaireDraft) -> int:
    """Return the number of questions across all sections."""

    return sum(len(section.questions) for section in draft.sections)


def total_named_sections(draft: QuestionnaireDraft) -> int:
    """Return how many sections already have a non-blank name."""

    return sum(1 for section in draft.sections if section.name.strip())


__all__ = [
    "Question",
    "QuestionnaireDraft",
    "Section",
    "add_question",
    "add_section",
    "delete_question",
    "delete_section",
    "describe_draft",
    "move_question",
    "move_section",
    "new_draft",
    "new_temp_id",
    "rename_draft",
    "rename_section",
    "set_question_observations",
    "set_question_order",
    "set_question_text",
    "set_section_skill_group",
    "toggle_section",
    "total_named_sections",
    "total_questions",
]
