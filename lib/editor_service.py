"""Load and save workflows for the questionnaire editor screens.

The functions here talk to the backend through any object exposing the
:class:`lib.api_client.AssessmentApiClient` methods, which keeps them easy to
exercise with fakes. They never mutate the draft they are given, so a failed
save leaves the user's work intact for a retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from lib.api_client import ApiError, AssessmentApiClient, SessionExpiredError
from lib.default_answers import DefaultAnswer
from lib.payload_builder import (
    build_create_payload,
    build_status_payload,
    build_update_payload,
    validate_draft,
)
from lib.questionnaire_tree import QuestionnaireDraft
from lib.reconciliation import (
    SyncReport,
    apply_default_answer_sync,
    hydrate_draft,
    merge_created,
    plan_default_answer_sync,
)
from lib.schema_defaults import (
    GENERIC_LOAD_ERROR,
    GENERIC_SAVE_ERROR,
    PARTIAL_SYNC_ERROR,
    QuestionnaireStatus,
)

logger = logging.getLogger(__name__)


class EditorLoadError(RuntimeError):
    """Raised when the editor cannot be populated from the backend."""


@dataclass
class EditorState:
    questionnaire_id: int
    draft: QuestionnaireDraft
    default_answers: List[DefaultAnswer] = field(default_factory=list)


@dataclass
class SaveOutcome:
    ok: bool
    message: str
    record: Optional[Dict[str, Any]] = None
    sync_report: Optional[SyncReport] = None
    validation_failed: bool = False
    session_expired: bool = False
    default_answers: Optional[List[DefaultAnswer]] = None


def load_skill_groups(client: AssessmentApiClient) -> List[Tuple[str, str]]:
    """Return ``(code, description)`` pairs from the skill-group catalog."""

    try:
        groups = client.list_skill_groups()
    except ApiError:
        logger.exception("Could not load skill-group catalog")
        raise
    return [
        (str(group.get("code", "")), str(group.get("description", "")))
        for group in groups
        if group.get("code")
    ]


def _fetch_detail(client: AssessmentApiClient, questionnaire_id: int) -> Dict[str, Any]:
    try:
        detail = client.get_questionnaire(questionnaire_id)
    except SessionExpiredError:
        raise
    except ApiError as exc:
        logger.exception("Could not load questionnaire %s", questionnaire_id)
        raise EditorLoadError(GENERIC_LOAD_ERROR) from exc
    if not isinstance(detail, dict):
        logger.error("Unexpected detail payload for questionnaire %s: %r", questionnaire_id, detail)
        raise EditorLoadError(GENERIC_LOAD_ERROR)
    return detail


def load_for_view(client: AssessmentApiClient, questionnaire_id: int) -> QuestionnaireDraft:
    """Fetch a questionnaire for the read-only preview."""

    return hydrate_draft(_fetch_detail(client, questionnaire_id))


def load_for_edit(client: AssessmentApiClient, questionnaire_id: int) -> EditorState:
    """Fetch a questionnaire and its default answers for the edit flow."""

    detail = _fetch_detail(client, questionnaire_id)
    try:
        answers = client.list_default_answers(questionnaire_id)
    except SessionExpiredError:
        raise
    except ApiError as exc:
        logger.exception("Could not load default answers of questionnaire %s", questionnaire_id)
        raise EditorLoadError(GENERIC_LOAD_ERROR) from exc

    return EditorState(
        questionnaire_id=int(detail.get("id") or questionnaire_id),
        draft=hydrate_draft(detail),
        default_answers=[DefaultAnswer.from_api(answer) for answer in answers],
    )


def save_new(client: AssessmentApiClient, draft: QuestionnaireDraft) -> SaveOutcome:
    """Validate ``draft`` and create it on the backend."""

    error = validate_draft(draft)
    if error:
        return SaveOutcome(ok=False, message=error, validation_failed=True)

    try:
        record = client.create_questionnaire(build_create_payload(draft))
    except SessionExpiredError:
        raise
    except ApiError:
        logger.exception("Could not create questionnaire %r", draft.name)
        return SaveOutcome(ok=False, message=GENERIC_SAVE_ERROR)

    logger.info("Created questionnaire %r", draft.name)
    return SaveOutcome(ok=True, message="Questionnaire saved successfully.", record=record)


def save_existing(client: AssessmentApiClient, state: EditorState) -> SaveOutcome:
    """Validate, update the questionnaire, then reconcile default answers.

    Once the update went through, any later failure is reported as a partial
    sync and ``default_answers`` carries the local list with the identifiers
    of answers that were created, so a retry does not create them again.
    """

    error = validate_draft(state.draft)
    if error:
        return SaveOutcome(ok=False, message=error, validation_failed=True)

    questionnaire_id = state.questionnaire_id
    try:
        record = client.update_questionnaire(build_update_payload(state.draft, questionnaire_id))
    except SessionExpiredError:
        raise
    except ApiError:
        logger.exception("Could not update questionnaire %s", questionnaire_id)
        return SaveOutcome(ok=False, message=GENERIC_SAVE_ERROR)

    try:
        server_answers = [
            DefaultAnswer.from_api(answer)
            for answer in client.list_default_answers(questionnaire_id)
        ]
    except ApiError as exc:
        logger.error("Could not list default answers of questionnaire %s: %s", questionnaire_id, exc)
        return SaveOutcome(
            ok=False,
            message=f"{PARTIAL_SYNC_ERROR} ({exc})",
            record=record,
            default_answers=list(state.default_answers),
            session_expired=isinstance(exc, SessionExpiredError),
        )

    plan = plan_default_answer_sync(server_answers, state.default_answers)
    report = apply_default_answer_sync(client, questionnaire_id, plan)
    merged = merge_created(state.default_answers, report)
    if not report.ok:
        return SaveOutcome(
            ok=False,
            message=f"{PARTIAL_SYNC_ERROR} ({report.summary()})",
            record=record,
            sync_report=report,
            default_answers=merged,
            session_expired=isinstance(report.failed.exception, SessionExpiredError),
        )

    logger.info("Updated questionnaire %s (%s)", questionnaire_id, report.summary())
    return SaveOutcome(
        ok=True,
        message="Questionnaire updated successfully.",
        record=record,
        sync_report=report,
        default_answers=merged,
    )


def change_status(
    client: AssessmentApiClient, questionnaire_id: int, status: QuestionnaireStatus
) -> Dict[str, Any]:
    """Send a status-only update, used to publish or archive from the list view."""

    logger.info("Setting questionnaire %s status to %s", questionnaire_id, status.value)
    return client.update_questionnaire(build_status_payload(questionnaire_id, status))


def publish(client: AssessmentApiClient, questionnaire_id: int) -> Dict[str, Any]:
    return change_status(client, questionnaire_id, QuestionnaireStatus.PUBLISHED)


def archive(client: AssessmentApiClient, questionnaire_id: int) -> Dict[str, Any]:
    return change_status(client, questionnaire_id, QuestionnaireStatus.ARCHIVED)


def delete(client: AssessmentApiClient, questionnaire_id: int) -> bool:
    logger.info("Deleting questionnaire %s", questionnaire_id)
    return client.delete_questionnaire(questionnaire_id)


__all__ = [
    "EditorLoadError",
    "EditorState",
    "SaveOutcome",
    "archive",
    "change_status",
    "delete",
    "load_for_edit",
    "load_for_view",
    "load_skill_groups",
    "publish",
    "save_existing",
    "save_new",
]
