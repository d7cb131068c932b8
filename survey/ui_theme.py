"""Shared look and feel for the survey Streamlit pages."""

from __future__ import annotations

from html import escape as html_escape
from typing import Any, Optional

import streamlit as st


_THEME_CSS = """
<style>
:root {
    --survey-accent: #6750A4;
    --survey-surface: #FFFFFF;
    --survey-background: #F0F0F0;
    --survey-text: #333333;
    --survey-muted: #5F6368;
    --survey-error: #B3261E;
}

[data-testid="stAppViewContainer"] {
    background: var(--survey-background);
}

.block-container {
    max-width: 760px;
    padding-top: 2rem;
    padding-bottom: 3rem;
}

.survey-header {
    text-align: center;
    margin-bottom: 1.25rem;
}

.survey-header__title {
    margin: 0;
    font-size: 2rem;
    font-weight: 600;
    color: var(--survey-text);
}

.survey-header__subtitle {
    margin: 0.35rem 0 0 0;
    color: var(--survey-muted);
}

.survey-label {
    font-weight: 700;
    margin-top: 0.9rem;
    margin-bottom: 0.3rem;
}

.survey-error {
    color: var(--survey-error);
    font-size: 0.9rem;
    margin-top: -0.4rem;
    margin-bottom: 0.6rem;
}

.survey-greeting {
    text-align: center;
    font-size: 1.5rem;
    font-weight: 700;
    color: var(--survey-text);
    margin: 3rem 0 1.5rem 0;
}
</style>
"""


def apply_app_theme(page_title: str, page_icon: Optional[str] = None) -> None:
    """Set up the page configuration and inject the shared CSS theme."""

    st.set_page_config(
        page_title=page_title,
        page_icon=page_icon,
        layout="centered",
        initial_sidebar_state="collapsed",
    )
    st.markdown(_THEME_CSS, unsafe_allow_html=True)


def page_header(
    title: str,
    subtitle: Optional[str] = None,
    *,
    container: Optional[Any] = None,
) -> None:
    """Render a centred page title with an optional subtitle."""

    subtitle_markup = (
        f"<p class='survey-header__subtitle'>{html_escape(subtitle)}</p>" if subtitle else ""
    )
    target = container.markdown if container is not None else st.markdown
    target(
        f"""
        <div class="survey-header">
            <h1 class="survey-header__title">{html_escape(title)}</h1>
            {subtitle_markup}
        </div>
        """,
        unsafe_allow_html=True,
    )


def section_label(text: str) -> None:
    """Render a bold label above a group of choices."""

    st.markdown(f"<p class='survey-label'>{html_escape(text)}</p>", unsafe_allow_html=True)


def field_error(message: str, *, anchor: str = "") -> None:
    """Render a field's validation message below its input."""

    anchor_attr = f" id='survey-error--{html_escape(anchor)}'" if anchor else ""
    st.markdown(f"<p class='survey-error'{anchor_attr}>{html_escape(message)}</p>", unsafe_allow_html=True)


def greeting(text: str) -> None:
    """Render the large greeting text."""

    st.markdown(f"<p class='survey-greeting'>{html_escape(text)}</p>", unsafe_allow_html=True)
