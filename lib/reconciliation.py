"""Bridge between client-side temporary identifiers and backend identifiers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from lib.api_client import ApiError
from lib.default_answers import DefaultAnswer
from lib.questionnaire_tree import Question, QuestionnaireDraft, Section, new_temp_id
from lib.schema_defaults import NEW_ENTITY_ID, QuestionnaireStatus

logger = logging.getLogger(__name__)


class DefaultAnswerApi(Protocol):
    def create_default_answer(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def delete_default_answer(self, answer_id: int) -> bool:
        ...


def _parse_status(value: Any) -> QuestionnaireStatus:
    try:
        return QuestionnaireStatus(value)
    except ValueError:
        logger.warning("Unknown questionnaire status %r, treating as draft.", value)
        return QuestionnaireStatus.DRAFT


def _optional_id(value: Any) -> Optional[int]:
    if value in (None, "", NEW_ENTITY_ID):
        return None
    return int(value)


def hydrate_draft(detail: Mapping[str, Any]) -> QuestionnaireDraft:
    """Map a backend ``QuestionnaireDetailDto`` into an editable draft.

    Persisted identifiers and orders are kept; every node receives a new
    temporary identifier that does not depend on its content.
    """

    sections: List[Section] = []
    for raw_section in detail.get("sections") or []:
        questions = tuple(
            Question(
                temp_id=new_temp_id(),
                id=_optional_id(raw_question.get("id")),
                text=str(raw_question.get("text") or ""),
                observations=str(raw_question.get("observations") or ""),
                order=int(raw_question.get("order") or 0),
            )
            for raw_question in raw_section.get("questions") or []
        )
        sections.append(
            Section(
                temp_id=new_temp_id(),
                id=_optional_id(raw_section.get("id")),
                name=str(raw_section.get("name") or ""),
                order=int(raw_section.get("order") or 0),
                questions=questions,
            )
        )

    return QuestionnaireDraft(
        name=str(detail.get("name") or ""),
        description=str(detail.get("description") or ""),
        sections=tuple(sections),
        status=_parse_status(detail.get("status", QuestionnaireStatus.DRAFT.value)),
    )


def persisted_id(node: Union[Section, Question]) -> int:
    """Return the backend identifier of ``node`` or the "create new" sentinel."""

    return node.id if node.id else NEW_ENTITY_ID


@dataclass(frozen=True)
class DefaultAnswerSyncPlan:
    to_delete: Tuple[DefaultAnswer, ...] = ()
    to_create: Tuple[DefaultAnswer, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.to_delete and not self.to_create


def plan_default_answer_sync(
    server: Sequence[DefaultAnswer],
    local: Sequence[DefaultAnswer],
) -> DefaultAnswerSyncPlan:
    """Diff the backend list against the local list by identifier.

    Server entries missing locally are deleted, local entries without an
    identifier are created, and entries present on both sides are kept as-is.
    """

    local_ids = {option.id for option in local if not option.is_new}
    to_delete = tuple(option for option in server if option.id not in local_ids)
    to_create = tuple(option for option in local if option.is_new)
    return DefaultAnswerSyncPlan(to_delete=to_delete, to_create=to_create)


@dataclass
class SyncStep:
    action: str
    answer: DefaultAnswer
    exception: Optional[ApiError] = None
    result: Optional[DefaultAnswer] = None

    @property
    def error(self) -> Optional[str]:
        return str(self.exception) if self.exception is not None else None

    def describe(self) -> str:
        target = f"#{self.answer.id}" if self.action == "delete" else repr(self.answer.label)
        return f"{self.action} {target}"


@dataclass
class SyncReport:
    """Outcome of applying a :class:`DefaultAnswerSyncPlan` call by call."""

    succeeded: List[SyncStep] = field(default_factory=list)
    failed: Optional[SyncStep] = None
    skipped: List[SyncStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failed is None

    @property
    def created(self) -> List[DefaultAnswer]:
        return [
            step.result
            for step in self.succeeded
            if step.action == "create" and step.result is not None
        ]

    def summary(self) -> str:
        """Return a human-readable account of the sync."""

        if self.ok:
            return f"{len(self.succeeded)} default answer change(s) applied."
        parts = [f"Failed to {self.failed.describe()}: {self.failed.error}"]
        if self.succeeded:
            parts.append("applied: " + ", ".join(step.describe() for step in self.succeeded))
        if self.skipped:
            parts.append("not attempted: " + ", ".join(step.describe() for step in self.skipped))
        return "; ".join(parts)


def apply_default_answer_sync(
    client: DefaultAnswerApi,
    questionnaire_id: int,
    plan: DefaultAnswerSyncPlan,
) -> SyncReport:
    """Run deletes then creates sequentially, stopping at the first failure.

    Calls that already went through are not rolled back; the report lists
    what was applied, what failed and what was never attempted.
    """

    report = SyncReport()
    if plan.is_empty:
        return report

    steps = [SyncStep("delete", answer) for answer in plan.to_delete]
    steps.extend(SyncStep("create", answer) for answer in plan.to_create)

    for index, step in enumerate(steps):
        try:
            if step.action == "delete":
                client.delete_default_answer(step.answer.id)
            else:
                created = client.create_default_answer(step.answer.create_request(questionnaire_id))
                if isinstance(created, Mapping):
                    step.result = DefaultAnswer.from_api(created)
        except ApiError as exc:
            logger.error("Default answer sync stopped at %s: %s", step.describe(), exc)
            step.exception = exc
            report.failed = step
            report.skipped = steps[index + 1 :]
            return report
        report.succeeded.append(step)
    return report


def merge_created(local: Sequence[DefaultAnswer], report: SyncReport) -> List[DefaultAnswer]:
    """Return ``local`` with unsaved entries replaced by what the backend created.

    Creates run in the order unsaved entries appear locally, so the n-th
    successful create belongs to the n-th unsaved entry. Entries whose create
    failed or was skipped stay unsaved for the next sync.
    """

    results = iter(step.result for step in report.succeeded if step.action == "create")
    merged: List[DefaultAnswer] = []
    for option in local:
        if option.is_new:
            created = next(results, None)
            if created is not None and not created.is_new:
                option = created
        merged.append(option)
    return merged


__all__ = [
    "DefaultAnswerSyncPlan",
    "SyncReport",
    "SyncStep",
    "apply_default_answer_sync",
    "hydrate_draft",
    "merge_created",
    "persisted_id",
    "plan_default_answer_sync",
]
