"""Library helpers for the behavioral assessment questionnaire editor."""

from .questionnaire_tree import (  # noqa: F401
    Question,
    QuestionnaireDraft,
    Section,
    new_draft,
)
from .schema_defaults import QuestionnaireStatus  # noqa: F401
