"""Tests for the HTML snippets rendered with ``unsafe_allow_html``."""

import importlib

ui_theme = importlib.import_module("lib.ui_theme")


def test_answer_swatch_escapes_label_and_colour() -> None:
    markup = ui_theme.answer_swatch("<b>Yes</b>", "#fff' onmouseover='x")

    assert "<b>" not in markup
    assert "&lt;b&gt;Yes&lt;/b&gt;" in markup
    assert "onmouseover='x" not in markup


def test_status_badge_shows_label_and_escapes_unknown_values() -> None:
    assert "Published" in ui_theme.status_badge("Published")
    assert "<script>" not in ui_theme.status_badge("<script>")
