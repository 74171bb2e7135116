"""Shared page setup and styling for the questionnaire editor screens."""

from __future__ import annotations

import html
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import streamlit as st

from lib.schema_defaults import STATUS_LABELS, QuestionnaireStatus


_BADGE_COLOURS = {
    QuestionnaireStatus.DRAFT: ("#FEF3C7", "#92400E"),
    QuestionnaireStatus.PUBLISHED: ("#DCFCE7", "#166534"),
    QuestionnaireStatus.ARCHIVED: ("#E2E8F0", "#334155"),
}

_EDITOR_CSS = """
<style>
.qe-banner {
    display: flex;
    align-items: baseline;
    gap: 0.9rem;
    padding: 1.1rem 1.4rem;
    border-left: 6px solid #4F46E5;
    border-radius: 0.75rem;
    background: #F8FAFC;
    margin-bottom: 1.4rem;
}
.qe-banner h1 { margin: 0; font-size: 1.7rem; color: #0F172A; }
.qe-banner p { margin: 0.2rem 0 0; color: #475569; }
.qe-banner .qe-banner-icon { font-size: 2rem; }
.qe-card-note { margin: -0.4rem 0 0.8rem; color: #475569; font-size: 0.92rem; }
.qe-badge {
    padding: 0.05rem 0.55rem;
    border-radius: 0.6rem;
    font-size: 0.78rem;
    font-weight: 600;
}
.qe-swatch {
    display: inline-block;
    width: 0.85rem;
    height: 0.85rem;
    margin-right: 0.35rem;
    border: 1px solid rgba(15, 23, 42, 0.15);
    border-radius: 50%;
    vertical-align: -0.1rem;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Configure the page and inject the editor stylesheet."""

    st.set_page_config(page_title=page_title, page_icon=page_icon, layout="wide")
    st.markdown(_EDITOR_CSS, unsafe_allow_html=True)


def page_header(title: str, subtitle: Optional[str] = None, icon: Optional[str] = None) -> None:
    parts = []
    if icon:
        parts.append(f"<span class='qe-banner-icon'>{icon}</span>")
    body = f"<h1>{title}</h1>"
    if subtitle:
        body += f"<p>{subtitle}</p>"
    parts.append(f"<div>{body}</div>")
    st.markdown(f"<div class='qe-banner'>{''.join(parts)}</div>", unsafe_allow_html=True)


@contextmanager
def section_card(title: Optional[str] = None, note: Optional[str] = None) -> Iterator[Any]:
    """Yield a bordered container headed by ``title`` and an optional note."""

    card = st.container(border=True)
    if title:
        card.subheader(title)
    if note:
        card.markdown(f"<p class='qe-card-note'>{note}</p>", unsafe_allow_html=True)
    yield card


def status_badge(status: Any) -> str:
    """Return HTML for a coloured pill showing the label of ``status``."""

    try:
        parsed = QuestionnaireStatus(status)
    except ValueError:
        return f"<span class='qe-badge'>{html.escape(str(status))}</span>"
    background, foreground = _BADGE_COLOURS[parsed]
    return (
        f"<span class='qe-badge' style='background:{background};color:{foreground}'>"
        f"{STATUS_LABELS[parsed]}</span>"
    )


def answer_swatch(label: str, color: str) -> str:
    """Return HTML for a colour dot followed by ``label``; both are escaped."""

    return (
        f"<span class='qe-swatch' style='background:{html.escape(color, quote=True)}'></span>"
        f"{html.escape(label)}"
    )
