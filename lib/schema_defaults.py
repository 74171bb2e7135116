"""Default values shared between the questionnaire editor screens."""

from __future__ import annotations

from enum import Enum
from typing import List


class QuestionnaireStatus(str, Enum):
    """Lifecycle states understood by the backend."""

    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


DEFAULT_API_BASE_URL = "http://localhost:5240/api"
DEFAULT_API_TIMEOUT = 10
DEFAULT_ANSWER_COLOR = "#3b82f6"
NEW_ENTITY_ID = 0

STATUS_LABELS = {
    QuestionnaireStatus.DRAFT: "Draft",
    QuestionnaireStatus.PUBLISHED: "Published",
    QuestionnaireStatus.ARCHIVED: "Archived",
}

# Validation messages, surfaced one at a time.
NAME_REQUIRED = "Please enter a name for the questionnaire."
SECTION_WITH_QUESTION_REQUIRED = "Please add at least one section with a question."
SECTION_NAMES_REQUIRED = "Please name all sections."
QUESTION_TEXT_REQUIRED = "Please fill in all questions."

GENERIC_SAVE_ERROR = "Could not save the questionnaire. Please try again."
GENERIC_LOAD_ERROR = "Could not load the questionnaire. Please try again."
PARTIAL_SYNC_ERROR = (
    "The questionnaire was saved but some default answers could not be synchronised. "
    "Reopen the editor to review the current state."
)

DEFAULT_ANSWER_SUGGESTIONS: tuple[str, ...] = ("Always", "Sometimes", "Never")


def answer_suggestions_list() -> List[str]:
    """Return a mutable list of suggested default answer labels."""

    return list(DEFAULT_ANSWER_SUGGESTIONS)
