"""Default values shared between the survey shell pages."""

from __future__ import annotations

DEFAULT_FORM_KEY = "ai_survey"
DEFAULT_PAGE_TITLE = "AI Usage Survey"
DEFAULT_SUBMIT_LABEL = "Submit"
DEFAULT_SUBMIT_SUCCESS_MESSAGE = "Thanks! Your answers were recorded."
DEFAULT_SUBMIT_ERROR_MESSAGE = "Please fix the highlighted fields before submitting."
DEFAULT_RETAIN_DESELECTED = True
DEFAULT_SHOW_ANSWERS_SUMMARY = True

LOGIN_PAGE_TITLE = "Login"
GREETING_TEXT = "Hello, World!"

SURVEY_PAGE = "pages/01_AI_Survey.py"
LOGIN_PAGE = "Home.py"
