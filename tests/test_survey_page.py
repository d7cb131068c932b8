"""Tests for the survey and login Streamlit pages."""

from __future__ import annotations

import importlib
import logging

import pytest


def _survey_page():
    return importlib.import_module("pages.01_AI_Survey")


@pytest.fixture
def session_state(monkeypatch):
    page = _survey_page()
    state = {}
    monkeypatch.setattr(page.st, "session_state", state)
    return state


def test_get_session_is_created_once_per_form(session_state) -> None:
    page = _survey_page()
    schema = page.load_form_schema("ai_survey")

    session = page.get_session(schema, retain_deselected=True)

    assert session_state[page.SESSION_STATE_KEY] is session
    assert page.get_session(schema, retain_deselected=True) is session

    page.reset_session()
    assert page.SESSION_STATE_KEY not in session_state
    assert page.get_session(schema, retain_deselected=True) is not session


def test_widget_values_update_the_session_only_when_changed(session_state) -> None:
    page = _survey_page()
    session = page.get_session(page.load_form_schema("ai_survey"), retain_deselected=True)

    assert page.apply_widget_value(session, "name", "Ada Lovelace") is True
    assert page.apply_widget_value(session, "name", "Ada Lovelace") is False
    assert session.get_value("name") == "Ada Lovelace"


def test_checkbox_states_toggle_the_selection(session_state) -> None:
    page = _survey_page()
    session = page.get_session(page.load_form_schema("ai_survey"), retain_deselected=True)

    toggled = page.sync_selection(
        session,
        "selectedModels",
        {"ChatGPT": False, "Bard": False, "Claude": True, "Copilot": True},
    )

    assert toggled == ["Claude", "Copilot"]
    assert session.get_value("selectedModels") == ["Claude", "Copilot"]
    assert page.sync_selection(
        session,
        "selectedModels",
        {"ChatGPT": False, "Bard": False, "Claude": True, "Copilot": False},
    ) == ["Copilot"]


def test_submitted_answers_are_recorded_and_tabulated(session_state, caplog) -> None:
    page = _survey_page()
    schema = page.load_form_schema("ai_survey")
    session = page.get_session(schema, retain_deselected=True)
    session.set_value("name", "Ada Lovelace")
    session.set_value("birthDate", "15-07-1990")
    session.toggle_multi_choice("selectedModels", "Claude")
    session.set_value("modelCons.Claude", "Overly polite")
    caplog.set_level(logging.INFO, logger=page.logger.name)

    assert session.submit(page.record_answers) == {}

    answers = session_state[page.LAST_ANSWERS_STATE_KEY]
    assert answers["modelCons"] == {"Claude": "Overly polite"}
    assert "Survey Data" in caplog.text

    table = page.answers_table(schema, answers)
    assert list(table.columns) == ["Question", "Answer"]
    rows = dict(zip(table["Question"], table["Answer"]))
    assert rows["Full Name"] == "Ada Lovelace"
    assert rows["AI Models Tried"] == "Claude"
    assert rows["Defects/Cons of Claude"] == "Overly polite"


def test_submitted_session_ignores_widget_changes(session_state) -> None:
    page = _survey_page()
    session = page.get_session(page.load_form_schema("ai_survey"), retain_deselected=True)
    session.set_value("name", "Ada Lovelace")
    session.set_value("birthDate", "15-07-1990")
    session.submit(lambda answers: None)

    assert page.apply_widget_value(session, "name", "Grace Hopper") is False
    assert page.sync_selection(session, "selectedModels", {"Claude": True}) == []
    assert session.get_value("name") == "Ada Lovelace"


def test_survey_settings_read_streamlit_secrets(monkeypatch) -> None:
    page = _survey_page()
    monkeypatch.setattr(
        page.st,
        "secrets",
        {"survey": {"form_key": " custom ", "retain_deselected": False}},
    )

    assert page.survey_settings() == {
        "form_key": "custom",
        "retain_deselected": False,
        "show_answers_summary": True,
    }


def test_survey_settings_fall_back_to_defaults(monkeypatch) -> None:
    page = _survey_page()
    monkeypatch.setattr(page.st, "secrets", {})

    settings = page.survey_settings()

    assert settings["form_key"] == "ai_survey"
    assert settings["retain_deselected"] is True


def test_login_logs_email_but_never_password(monkeypatch, caplog) -> None:
    home = importlib.import_module("Home")
    state = {}
    monkeypatch.setattr(home.st, "session_state", state)
    caplog.set_level(logging.INFO, logger=home.logger.name)

    email = home.handle_login("  ada@example.com ", "s3cret-pass")

    assert email == "ada@example.com"
    assert state[home.LOGIN_EMAIL_KEY] == "ada@example.com"
    assert "ada@example.com" in caplog.text
    assert "s3cret-pass" not in caplog.text
