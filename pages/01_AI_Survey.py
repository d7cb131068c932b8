"""Streamlit page rendering the AI usage survey from its form schema."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from survey.form_store import load_form_schema
from survey.schema import MULTISELECT, SINGLE, SchemaError, SurveySchema
from survey.schema_defaults import (
    DEFAULT_FORM_KEY,
    DEFAULT_PAGE_TITLE,
    DEFAULT_RETAIN_DESELECTED,
    DEFAULT_SHOW_ANSWERS_SUMMARY,
    DEFAULT_SUBMIT_ERROR_MESSAGE,
    DEFAULT_SUBMIT_LABEL,
    DEFAULT_SUBMIT_SUCCESS_MESSAGE,
)
from survey.submission import INVALID, FormSession, VisibleField
from survey.ui_theme import apply_app_theme, field_error, page_header, section_label

logger = logging.getLogger(__name__)

SESSION_STATE_KEY = "survey_session"
LAST_ANSWERS_STATE_KEY = "survey_last_answers"


def _secrets_dict(name: str) -> Dict[str, Any]:
    """Return a mapping stored under ``name`` in Streamlit secrets."""

    try:
        value = st.secrets.get(name, {})  # type: ignore[arg-type]
    except Exception:  # pragma: no cover - secrets.toml is optional
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    return {}


def survey_settings() -> Dict[str, Any]:
    """Return the survey page configuration merged with the defaults."""

    secrets = _secrets_dict("survey")
    form_key = str(secrets.get("form_key") or DEFAULT_FORM_KEY).strip() or DEFAULT_FORM_KEY
    retain = secrets.get("retain_deselected")
    show_summary = secrets.get("show_answers_summary")
    return {
        "form_key": form_key,
        "retain_deselected": DEFAULT_RETAIN_DESELECTED if retain is None else bool(retain),
        "show_answers_summary": (
            DEFAULT_SHOW_ANSWERS_SUMMARY if show_summary is None else bool(show_summary)
        ),
    }


def get_session(schema: SurveySchema, *, retain_deselected: bool) -> FormSession:
    """Return the form session stored in ``st.session_state``, creating it on mount."""

    session = st.session_state.get(SESSION_STATE_KEY)
    if not isinstance(session, FormSession) or session.schema.key != schema.key:
        session = FormSession(schema, retain_deselected=retain_deselected)
        st.session_state[SESSION_STATE_KEY] = session
    return session


def reset_session() -> None:
    """Drop the current form so the next run mounts a fresh one."""

    st.session_state.pop(SESSION_STATE_KEY, None)


def apply_widget_value(session: FormSession, key: str, value: Any) -> bool:
    """Store ``value`` for ``key`` when it differs from the current value."""

    if session.submitted or session.get_value(key) == value:
        return False
    session.set_value(key, value)
    return True


def sync_selection(session: FormSession, field_key: str, checked: Mapping[str, bool]) -> List[str]:
    """Toggle every option whose checkbox state differs from the selection."""

    if session.submitted:
        return []
    selected = set(session.get_value(field_key) or [])
    toggled: List[str] = []
    for option, is_checked in checked.items():
        if bool(is_checked) != (option in selected):
            session.toggle_multi_choice(field_key, option)
            toggled.append(option)
    return toggled


def record_answers(answers: Dict[str, Any]) -> None:
    """Sink for valid answers: log them and keep them for the summary."""

    logger.info("Survey Data: %s", answers)
    st.session_state[LAST_ANSWERS_STATE_KEY] = answers


def answers_table(schema: SurveySchema, answers: Mapping[str, Any]) -> pd.DataFrame:
    """Return the submitted answers as a two-column table."""

    dynamic = schema.get_dynamic_sub_schema()
    rows: List[Dict[str, str]] = []
    for entry in schema.get_static_fields():
        value = answers.get(entry.key)
        if isinstance(value, list):
            value = ", ".join(value)
        rows.append({"Question": entry.label or entry.key, "Answer": "" if value is None else str(value)})
        if dynamic is not None and entry.key == dynamic.source_field:
            follow_ups = answers.get(dynamic.answers_key) or {}
            for option, text in follow_ups.items():
                rows.append({"Question": dynamic.label_for(option), "Answer": text})
    return pd.DataFrame(rows, columns=["Question", "Answer"])


def _option_label(option: str) -> str:
    return option.capitalize() if option.islower() else option


def _render_text(session: FormSession, field: VisibleField) -> None:
    widget_key = f"survey_field--{field.key}"
    current = session.get_value(field.key)
    current_text = "" if current is None else str(current)
    if field.multiline:
        value = st.text_area(
            field.label,
            value=current_text,
            key=widget_key,
            height=120,
            disabled=session.submitted,
        )
    else:
        value = st.text_input(
            field.label,
            value=current_text,
            key=widget_key,
            placeholder=field.placeholder,
            help=field.help,
            disabled=session.submitted,
        )
    apply_widget_value(session, field.key, value)
    if field.error:
        field_error(field.error, anchor=field.key)


def _render_single(session: FormSession, field: VisibleField) -> None:
    options = list(field.options)
    current = session.get_value(field.key)
    index: Optional[int] = options.index(current) if current in options else None
    section_label(field.label)
    selection = st.radio(
        field.label,
        options,
        index=index,
        key=f"survey_field--{field.key}",
        format_func=_option_label,
        label_visibility="collapsed",
        disabled=session.submitted,
    )
    if selection is not None:
        apply_widget_value(session, field.key, selection)
    if field.error:
        field_error(field.error, anchor=field.key)


def _render_multiselect(session: FormSession, field: VisibleField) -> None:
    section_label(field.label)
    selected = set(session.get_value(field.key) or [])
    checked = {
        option: st.checkbox(
            option,
            value=option in selected,
            key=f"survey_field--{field.key}--{option}",
            disabled=session.submitted,
        )
        for option in field.options
    }
    sync_selection(session, field.key, checked)
    if field.error:
        field_error(field.error, anchor=field.key)

    # Follow-up fields reflect the selection after this run's toggles.
    for follow_up in session.visible_fields():
        if follow_up.is_dynamic:
            _render_text(session, follow_up)


def render_field(session: FormSession, field: VisibleField) -> None:
    """Render the widget for a static field."""

    if field.kind == SINGLE:
        _render_single(session, field)
    elif field.kind == MULTISELECT:
        _render_multiselect(session, field)
    else:
        _render_text(session, field)


def main() -> None:
    """Render the survey page."""

    settings = survey_settings()
    try:
        schema = load_form_schema(settings["form_key"])
    except SchemaError as exc:
        apply_app_theme(page_title=DEFAULT_PAGE_TITLE)
        page_header(DEFAULT_PAGE_TITLE)
        st.error(f"The survey form could not be loaded: {exc}")
        return

    title = schema.label or DEFAULT_PAGE_TITLE
    apply_app_theme(page_title=title)
    page_header(title)

    session = get_session(schema, retain_deselected=settings["retain_deselected"])

    for field in session.visible_fields():
        if not field.is_dynamic:
            render_field(session, field)

    if session.submitted:
        st.success(DEFAULT_SUBMIT_SUCCESS_MESSAGE)
        answers = st.session_state.get(LAST_ANSWERS_STATE_KEY)
        if settings["show_answers_summary"] and isinstance(answers, Mapping):
            st.dataframe(answers_table(schema, answers), hide_index=True)
        if st.button("Start a new survey"):
            reset_session()
            st.rerun()
        return

    if session.status == INVALID:
        st.error(DEFAULT_SUBMIT_ERROR_MESSAGE)

    if st.button(DEFAULT_SUBMIT_LABEL, type="primary", key=f"submit_{schema.key}"):
        session.submit(record_answers)
        st.rerun()


if __name__ == "__main__":
    main()
