"""Tests for the shared Streamlit theme helpers."""

from __future__ import annotations

import importlib

import pytest


@pytest.fixture
def rendered(monkeypatch):
    ui_theme = importlib.import_module("survey.ui_theme")
    calls = []
    monkeypatch.setattr(ui_theme.st, "markdown", lambda body, **kwargs: calls.append(body))
    return calls


def test_labels_and_messages_are_html_escaped(rendered) -> None:
    ui_theme = importlib.import_module("survey.ui_theme")

    ui_theme.section_label("Models <script>alert(1)</script>")
    ui_theme.field_error("Use <b>letters</b> & spaces", anchor="x'y")
    ui_theme.greeting("Hello <World>")

    assert rendered[0] == "<p class='survey-label'>Models &lt;script&gt;alert(1)&lt;/script&gt;</p>"
    assert rendered[1] == (
        "<p class='survey-error' id='survey-error--x&#x27;y'>Use &lt;b&gt;letters&lt;/b&gt; &amp; spaces</p>"
    )
    assert rendered[2] == "<p class='survey-greeting'>Hello &lt;World&gt;</p>"


def test_page_header_escapes_title_and_subtitle(rendered) -> None:
    ui_theme = importlib.import_module("survey.ui_theme")

    ui_theme.page_header("Q&A", subtitle="<i>AI</i> usage")

    assert "<h1 class=\"survey-header__title\">Q&amp;A</h1>" in rendered[0]
    assert "<p class='survey-header__subtitle'>&lt;i&gt;AI&lt;/i&gt; usage</p>" in rendered[0]
