"""Utilities for the questionnaire list returned by the backend."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from lib.schema_defaults import STATUS_LABELS, QuestionnaireStatus

EDITOR_SELECTED_STATE_KEY = "editor_selected_questionnaire"
LIST_FEEDBACK_STATE_KEY = "list_feedback"
ALL_STATUSES = "all"


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return value if isinstance(value, dict) else {}


def _ensure_sequence(value: Any) -> List[Dict[str, Any]]:
    """Return ``value`` if it is a list, otherwise an empty list."""

    return value if isinstance(value, list) else []


def parse_status(value: Any) -> Optional[QuestionnaireStatus]:
    """Return the matching status or ``None`` for unknown values."""

    try:
        return QuestionnaireStatus(value)
    except ValueError:
        return None


def status_label(value: Any) -> str:
    status = parse_status(value)
    if status is None:
        return str(value or "Unknown")
    return STATUS_LABELS[status]


def normalize_questionnaires(payload: Any) -> List[Dict[str, Any]]:
    """Return the ``questionnaires`` entries of a list-forms response with defaults."""

    entries = _ensure_sequence(_ensure_mapping(payload).get("questionnaires"))
    if not entries and isinstance(payload, list):
        entries = payload

    normalised: List[Dict[str, Any]] = []
    for raw in entries:
        entry = _ensure_mapping(raw).copy()
        if "id" not in entry:
            continue
        entry["id"] = int(entry["id"])
        entry["name"] = str(entry.get("name") or "").strip() or f"Questionnaire {entry['id']}"
        entry["description"] = str(entry.get("description") or "")
        status = parse_status(entry.get("status"))
        entry["status"] = (status or QuestionnaireStatus.DRAFT).value
        entry["createdAt"] = str(entry.get("createdAt") or "")
        normalised.append(entry)
    return normalised


def filter_questionnaires(
    questionnaires: Iterable[Dict[str, Any]],
    search: str = "",
    status: str = ALL_STATUSES,
) -> List[Dict[str, Any]]:
    """Return entries matching ``search`` (name or description) and ``status``."""

    needle = search.strip().lower()
    matches: List[Dict[str, Any]] = []
    for entry in questionnaires:
        if status != ALL_STATUSES and entry.get("status") != status:
            continue
        if needle:
            haystack = f"{entry.get('name', '')} {entry.get('description', '')}".lower()
            if needle not in haystack:
                continue
        matches.append(entry)
    return matches


def status_counts(questionnaires: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Return the number of questionnaires per status value."""

    counts = {status.value: 0 for status in QuestionnaireStatus}
    for entry in questionnaires:
        status = entry.get("status")
        if status in counts:
            counts[status] += 1
    return counts


def can_publish(entry: Dict[str, Any]) -> bool:
    return entry.get("status") == QuestionnaireStatus.DRAFT.value


def can_archive(entry: Dict[str, Any]) -> bool:
    return entry.get("status") == QuestionnaireStatus.PUBLISHED.value


def can_delete(entry: Dict[str, Any]) -> bool:
    """Only drafts may be deleted."""

    return entry.get("status") == QuestionnaireStatus.DRAFT.value

