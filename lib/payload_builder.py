"""Validation and request payloads for saving a questionnaire draft."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from lib.questionnaire_tree import Question, QuestionnaireDraft, Section
from lib.reconciliation import persisted_id
from lib.schema_defaults import (
    NAME_REQUIRED,
    QUESTION_TEXT_REQUIRED,
    SECTION_NAMES_REQUIRED,
    SECTION_WITH_QUESTION_REQUIRED,
    QuestionnaireStatus,
)


def validate_draft(draft: QuestionnaireDraft) -> Optional[str]:
    """Return the first validation message for ``draft`` or ``None`` if valid."""

    if not draft.name.strip():
        return NAME_REQUIRED
    if not draft.sections or not any(section.questions for section in draft.sections):
        return SECTION_WITH_QUESTION_REQUIRED
    if any(not section.name.strip() for section in draft.sections):
        return SECTION_NAMES_REQUIRED
    if any(
        not question.text.strip()
        for section in draft.sections
        for question in section.questions
    ):
        return QUESTION_TEXT_REQUIRED
    return None


def _question_payload(question: Question, order: int, *, with_id: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if with_id:
        payload["id"] = persisted_id(question)
    payload["text"] = question.text
    if question.observations:
        payload["observations"] = question.observations
    payload["order"] = order
    return payload


def _section_payload(section: Section, order: int, *, with_id: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    if with_id:
        payload["id"] = persisted_id(section)
    payload["name"] = section.name
    payload["order"] = order
    if with_id:
        questions = [
            _question_payload(question, question.order, with_id=True)
            for question in section.questions
        ]
    else:
        questions = [
            _question_payload(question, position, with_id=False)
            for position, question in enumerate(section.questions)
        ]
    payload["questions"] = questions
    return payload


def build_create_payload(draft: QuestionnaireDraft) -> Dict[str, Any]:
    """Return the body for the create-form endpoint.

    Persisted identifiers are omitted and ``order`` follows array position.
    """

    payload: Dict[str, Any] = {"name": draft.name}
    if draft.description:
        payload["description"] = draft.description
    payload["status"] = QuestionnaireStatus.DRAFT.value
    payload["sections"] = [
        _section_payload(section, position, with_id=False)
        for position, section in enumerate(draft.sections)
    ]
    return payload


def build_update_payload(draft: QuestionnaireDraft, questionnaire_id: int) -> Dict[str, Any]:
    """Return the body for the update-form endpoint.

    Every section and question carries its backend identifier (``0`` when it
    was added locally) and its stored ``order``; the status is passed through.
    """

    payload: Dict[str, Any] = {"id": questionnaire_id, "name": draft.name}
    if draft.description:
        payload["description"] = draft.description
    payload["status"] = draft.status.value
    sections: List[Dict[str, Any]] = [
        _section_payload(section, section.order, with_id=True) for section in draft.sections
    ]
    payload["sections"] = sections
    return payload


def build_status_payload(questionnaire_id: int, status: QuestionnaireStatus) -> Dict[str, Any]:
    """Return a minimal update body changing only the questionnaire status."""

    return {"id": questionnaire_id, "status": status.value}


__all__ = [
    "build_create_payload",
    "build_status_payload",
    "build_update_payload",
    "validate_draft",
]
