"""Submission of survey answers and the lifecycle of a form session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from survey.form_state import FormState
from survey.schema import SurveySchema, TEXT
from survey.validation import ValidationResult, validate

logger = logging.getLogger(__name__)

Answers = Dict[str, Any]
AnswerSink = Callable[[Answers], Any]

EDITING = "editing"
VALIDATING = "validating"
INVALID = "invalid"
SUBMITTED = "submitted"


class FormSessionClosed(RuntimeError):
    """Raised when a submitted form session is edited."""


def build_answers(schema: SurveySchema, state: FormState) -> Answers:
    """Return the normalised answer record for ``state``.

    Static fields appear in declaration order. The follow-up texts are placed
    right after their source field under the dynamic ``answers_key``, one entry
    per selected option, with ``""`` for options that have no text yet.
    """

    dynamic = schema.get_dynamic_sub_schema()
    answers: Answers = {}
    for entry in schema.get_static_fields():
        answers[entry.key] = state.get_value(entry.key)
        if dynamic is not None and entry.key == dynamic.source_field:
            answers[dynamic.answers_key] = {
                option: state.get_value(dynamic.key_for(option)) or ""
                for option in state.selected_options()
            }
    return answers


def submit(schema: SurveySchema, state: FormState, on_valid: AnswerSink) -> ValidationResult:
    """Validate ``state`` and hand the answers to ``on_valid`` when valid.

    The validation result is returned in both cases; ``on_valid`` is only
    called when it is empty. The state is never modified.
    """

    errors = validate(schema, state)
    if errors:
        logger.info("Submission of %s blocked by %d invalid field(s)", schema.key, len(errors))
        return errors

    on_valid(build_answers(schema, state))
    logger.info("Submitted %s", schema.key)
    return errors


@dataclass(frozen=True)
class VisibleField:
    """A field the UI should display, with its current error if any."""

    key: str
    label: str
    kind: str
    options: tuple = ()
    error: Optional[str] = None
    option: Optional[str] = None
    multiline: bool = False
    placeholder: Optional[str] = None
    help: Optional[str] = None

    @property
    def is_dynamic(self) -> bool:
        return self.option is not None


class FormSession:
    """One survey form from mount to submission.

    The session moves from ``editing`` to ``validating`` on submit, then either
    to ``invalid`` (back to ``editing`` on the next change) or to
    ``submitted``, which is final. A new session is needed for a new form.
    """

    def __init__(self, schema: SurveySchema, *, retain_deselected: bool = True) -> None:
        self.schema = schema
        self.state = FormState.initialize(schema, retain_deselected=retain_deselected)
        self.status = EDITING
        self.errors: ValidationResult = {}

    @property
    def submitted(self) -> bool:
        return self.status == SUBMITTED

    def _transition(self, status: str) -> None:
        logger.debug("Form %s: %s -> %s", self.schema.key, self.status, status)
        self.status = status

    def _ensure_editable(self) -> None:
        if self.submitted:
            raise FormSessionClosed(f"Form {self.schema.key!r} has already been submitted.")
        if self.status == INVALID:
            self._transition(EDITING)

    def get_value(self, key: str) -> Any:
        return self.state.get_value(key)

    def set_value(self, key: str, value: Any) -> None:
        self._ensure_editable()
        self.state.set_value(key, value)

    def toggle_multi_choice(self, field_key: str, option: str) -> None:
        self._ensure_editable()
        self.state.toggle_multi_choice(field_key, option)

    def submit(self, on_valid: AnswerSink) -> ValidationResult:
        if not self.submitted:
            self._transition(VALIDATING)
        self.errors = submit(self.schema, self.state, on_valid)
        if not self.submitted:
            self._transition(INVALID if self.errors else SUBMITTED)
        return dict(self.errors)

    def error_for(self, key: str) -> Optional[str]:
        return self.errors.get(key)

    def visible_fields(self) -> List[VisibleField]:
        """Static fields in order, then materialised follow-up fields."""

        fields = [
            VisibleField(
                key=entry.key,
                label=entry.label or entry.key,
                kind=entry.kind,
                options=entry.options,
                error=self.errors.get(entry.key),
                multiline=entry.multiline,
                placeholder=entry.placeholder,
                help=entry.help,
            )
            for entry in self.schema.get_static_fields()
        ]
        dynamic = self.schema.get_dynamic_sub_schema()
        if dynamic is not None:
            for option in self.state.selected_options():
                key = dynamic.key_for(option)
                fields.append(
                    VisibleField(
                        key=key,
                        label=dynamic.label_for(option),
                        kind=TEXT,
                        error=self.errors.get(key),
                        option=option,
                    )
                )
        return fields


__all__ = [
    "Answers",
    "EDITING",
    "FormSession",
    "FormSessionClosed",
    "INVALID",
    "SUBMITTED",
    "VALIDATING",
    "VisibleField",
    "build_answers",
    "submit",
]
