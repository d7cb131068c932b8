"""Validation of survey answers against their field rules."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from survey.form_state import FormState
from survey.schema import Rule, SurveySchema

logger = logging.getLogger(__name__)

ValidationResult = Dict[str, str]


def _first_failure(rules: Sequence[Rule], value: Any, state: FormState) -> Optional[str]:
    """Return the message of the first rule ``value`` fails, if any."""

    for rule in rules:
        context = {reference: state.get_value(reference) for reference in rule.references}
        if not rule.passes(value, context):
            return rule.message
    return None


def validate(schema: SurveySchema, state: FormState) -> ValidationResult:
    """Return ``field key -> error message`` for every invalid field.

    Static fields are checked in declaration order, then the follow-up fields
    that are currently materialised. Only the first failing rule of a field is
    reported. Follow-up texts kept for deselected options are ignored.
    """

    errors: ValidationResult = {}
    for entry in schema.get_static_fields():
        message = _first_failure(entry.rules, state.get_value(entry.key), state)
        if message is not None:
            errors[entry.key] = message

    dynamic = schema.get_dynamic_sub_schema()
    if dynamic is not None and dynamic.rules:
        for key in state.derive_dynamic_keys():
            message = _first_failure(dynamic.rules, state.get_value(key), state)
            if message is not None:
                errors[key] = message

    if errors:
        logger.debug("Validation failed for %s", ", ".join(errors))
    return errors


__all__ = ["ValidationResult", "validate"]
