"""Streamlit greeting screen with a way back to the login."""

from __future__ import annotations

import streamlit as st

from survey.schema_defaults import GREETING_TEXT, LOGIN_PAGE
from survey.ui_theme import apply_app_theme, greeting


def main() -> None:
    """Render the greeting screen."""

    apply_app_theme(page_title="Hello")
    greeting(GREETING_TEXT)
    st.page_link(LOGIN_PAGE, label="To Login")


if __name__ == "__main__":
    main()
