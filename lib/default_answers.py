"""Default answer options attached to a questionnaire in the edit flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from lib.schema_defaults import DEFAULT_ANSWER_COLOR, NEW_ENTITY_ID


@dataclass(frozen=True)
class DefaultAnswer:
    """A labelled, coloured answer option; ``id == 0`` means not yet created."""

    label: str
    color: str = DEFAULT_ANSWER_COLOR
    questionnaire_id: int = 0
    id: int = NEW_ENTITY_ID

    @property
    def is_new(self) -> bool:
        return not self.id

    @classmethod
    def from_api(cls, payload: Mapping[str, Any]) -> "DefaultAnswer":
        """Build an option from a backend ``DefaultAnswerDto`` mapping."""

        return cls(
            id=int(payload.get("id") or NEW_ENTITY_ID),
            questionnaire_id=int(payload.get("questionnaireId") or 0),
            label=str(payload.get("label") or ""),
            color=str(payload.get("color") or DEFAULT_ANSWER_COLOR),
        )

    def create_request(self, questionnaire_id: int) -> Dict[str, Any]:
        """Return the body for the create-default-answer endpoint."""

        return {
            "questionnaireId": questionnaire_id,
            "label": self.label,
            "color": self.color,
        }


def add_option(
    options: Sequence[DefaultAnswer],
    questionnaire_id: int,
    label: str,
    color: str = DEFAULT_ANSWER_COLOR,
) -> List[DefaultAnswer]:
    """Return ``options`` with a new unsaved entry appended.

    Blank labels are ignored and the original entries are returned unchanged.
    """

    cleaned = (label or "").strip()
    if not cleaned:
        return list(options)
    option = DefaultAnswer(
        label=cleaned,
        color=color or DEFAULT_ANSWER_COLOR,
        questionnaire_id=questionnaire_id,
    )
    return [*options, option]


def remove_option(options: Sequence[DefaultAnswer], index: int) -> List[DefaultAnswer]:
    """Return ``options`` without the entry at ``index``."""

    return [option for position, option in enumerate(options) if position != index]


__all__ = ["DefaultAnswer", "add_option", "remove_option"]
