"""Tests for draft validation and request payloads."""

from __future__ import annotations

import importlib

import pytest

tree = importlib.import_module("lib.questionnaire_tree")
builder = importlib.import_module("lib.payload_builder")
defaults = importlib.import_module("lib.schema_defaults")


def _valid_draft():
    draft = tree.rename_draft(tree.new_draft(), "Social Skills")
    draft = tree.add_section(draft)
    section_id = draft.sections[0].temp_id
    draft = tree.rename_section(draft, section_id, "Communication")
    draft = tree.add_question(draft, section_id)
    question_id = draft.sections[0].questions[0].temp_id
    return tree.set_question_text(draft, section_id, question_id, "Makes eye contact?")


def test_valid_draft_passes() -> None:
    assert builder.validate_draft(_valid_draft()) is None


def test_blank_name_is_rejected_first() -> None:
    draft = tree.rename_draft(tree.new_draft(), "   ")

    assert builder.validate_draft(draft) == defaults.NAME_REQUIRED


def test_zero_sections_is_rejected() -> None:
    draft = tree.rename_draft(tree.new_draft(), "Social Skills")

    assert builder.validate_draft(draft) == defaults.SECTION_WITH_QUESTION_REQUIRED


def test_sections_without_questions_are_rejected() -> None:
    draft = tree.add_section(tree.rename_draft(tree.new_draft(), "Social Skills"))
    draft = tree.rename_section(draft, draft.sections[0].temp_id, "Communication")

    assert builder.validate_draft(draft) == defaults.SECTION_WITH_QUESTION_REQUIRED


def test_unnamed_section_is_rejected() -> None:
    draft = tree.add_section(_valid_draft())

    assert builder.validate_draft(draft) == defaults.SECTION_NAMES_REQUIRED


def test_whitespace_question_is_rejected() -> None:
    draft = _valid_draft()
    section_id = draft.sections[0].temp_id
    draft = tree.add_question(draft, section_id)
    draft = tree.set_question_text(draft, section_id, draft.sections[0].questions[1].temp_id, "  ")

    assert builder.validate_draft(draft) == defaults.QUESTION_TEXT_REQUIRED


def test_first_failing_check_wins() -> None:
    draft = tree.add_section(tree.new_draft())
    draft = tree.add_question(draft, draft.sections[0].temp_id)

    # Empty name, unnamed section and empty question: only the name is reported.
    assert builder.validate_draft(draft) == defaults.NAME_REQUIRED


def test_create_payload_for_social_skills_scenario() -> None:
    payload = builder.build_create_payload(_valid_draft())

    assert payload == {
        "name": "Social Skills",
        "status": "Draft",
        "sections": [
            {
                "name": "Communication",
                "order": 0,
                "questions": [{"text": "Makes eye contact?", "order": 0}],
            }
        ],
    }


def test_create_payload_uses_array_position_and_keeps_optional_fields() -> None:
    draft = tree.describe_draft(_valid_draft(), "Screening for toddlers")
    section_id = draft.sections[0].temp_id
    question_id = draft.sections[0].questions[0].temp_id
    draft = tree.set_question_observations(draft, section_id, question_id, "During play")
    draft = tree.set_question_order(draft, section_id, question_id, 9)
    draft = tree.add_section(draft)
    draft = tree.move_section(draft, draft.sections[1].temp_id, -1)

    payload = builder.build_create_payload(draft)

    assert payload["description"] == "Screening for toddlers"
    assert [section["order"] for section in payload["sections"]] == [0, 1]
    question = payload["sections"][1]["questions"][0]
    assert question == {"text": "Makes eye contact?", "observations": "During play", "order": 0}
    assert "id" not in payload["sections"][1]


def test_update_payload_marks_new_nodes_with_zero() -> None:
    draft = _valid_draft()

    payload = builder.build_update_payload(draft, 42)

    assert payload["id"] == 42
    assert payload["status"] == "Draft"
    assert payload["sections"][0]["id"] == 0
    assert payload["sections"][0]["questions"][0]["id"] == 0


@pytest.mark.parametrize("status", ["Published", "Archived"])
def test_update_payload_passes_status_through(status) -> None:
    draft = tree.QuestionnaireDraft(
        name="Loaded",
        status=defaults.QuestionnaireStatus(status),
    )

    assert builder.build_update_payload(draft, 1)["status"] == status


def test_status_payload_only_carries_id_and_status() -> None:
    payload = builder.build_status_payload(7, defaults.QuestionnaireStatus.PUBLISHED)

    assert payload == {"id": 7, "status": "Published"}
