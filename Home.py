"""Streamlit login screen leading to the AI usage survey."""

from __future__ import annotations

import logging

import streamlit as st

from survey.schema_defaults import LOGIN_PAGE_TITLE, SURVEY_PAGE
from survey.ui_theme import apply_app_theme, page_header

logger = logging.getLogger(__name__)

LOGIN_EMAIL_KEY = "login_email"


def _switch_to_survey() -> None:
    """Navigate to the survey page."""

    if hasattr(st, "switch_page"):
        try:
            st.switch_page(SURVEY_PAGE)
        except Exception:  # pragma: no cover - streamlit navigation fallback
            st.info("Use the navigation menu to open the survey.")
    else:
        st.info("Use the navigation menu to open the survey.")


def handle_login(email: str, password: str) -> str:
    """Record the login attempt and return the e-mail to remember.

    Credentials are not checked here; the password is never logged or stored.
    """

    cleaned = email.strip()
    logger.info("Email: %s", cleaned)
    st.session_state[LOGIN_EMAIL_KEY] = cleaned
    return cleaned


def main() -> None:
    """Render the login screen."""

    apply_app_theme(page_title=LOGIN_PAGE_TITLE)
    page_header(LOGIN_PAGE_TITLE)

    email = st.text_input(
        "Email",
        value=st.session_state.get(LOGIN_EMAIL_KEY, ""),
        key="login_field--email",
        autocomplete="email",
    )
    password = st.text_input(
        "Password",
        type="password",
        key="login_field--password",
    )

    if st.button("Login", type="primary", use_container_width=True, key="testButton"):
        handle_login(email, password)
        _switch_to_survey()


if __name__ == "__main__":
    main()
