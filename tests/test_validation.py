"""Tests for validating survey answers."""

from __future__ import annotations

import importlib

from survey.form_state import FormState
from survey.schema import (
    DynamicSubSchema,
    FieldSchema,
    SurveySchema,
    date_format,
    pattern,
    required,
    required_when,
)


def _schema(dynamic_rules=()) -> SurveySchema:
    return SurveySchema(
        key="demo",
        fields=(
            FieldSchema(
                key="name",
                default="",
                rules=(
                    required("Name is required"),
                    pattern(r"^[a-zA-Z\s'-]+$", "Name contains invalid characters"),
                ),
            ),
            FieldSchema(
                key="birthDate",
                kind="date",
                default="",
                rules=(required("Birth Date is required"), date_format("Not valid")),
            ),
            FieldSchema(
                key="selectedModels",
                kind="multiselect",
                options=("ChatGPT", "Claude"),
                rules=(required("Pick at least one model"),),
            ),
            FieldSchema(
                key="useCase",
                default="",
                rules=(required_when("selectedModels", "includes", "ChatGPT", "Tell us how you use it"),),
            ),
        ),
        dynamic=DynamicSubSchema(
            source_field="selectedModels",
            key_template="modelCons.{option}",
            answers_key="modelCons",
            rules=tuple(dynamic_rules),
        ),
    )


def _validate(schema, state):
    return importlib.import_module("survey.validation").validate(schema, state)


def _filled_state(schema: SurveySchema) -> FormState:
    state = FormState.initialize(schema)
    state.set_value("name", "Ada Lovelace")
    state.set_value("birthDate", "15-07-1990")
    state.toggle_multi_choice("selectedModels", "Claude")
    return state


def test_empty_required_fields_are_reported() -> None:
    schema = _schema()
    state = FormState.initialize(schema)

    assert _validate(schema, state) == {
        "name": "Name is required",
        "birthDate": "Birth Date is required",
        "selectedModels": "Pick at least one model",
    }


def test_non_empty_values_clear_required_errors() -> None:
    schema = _schema()
    state = _filled_state(schema)

    assert _validate(schema, state) == {}


def test_only_first_failing_rule_is_reported() -> None:
    schema = _schema()
    state = _filled_state(schema)
    state.set_value("name", "")

    assert _validate(schema, state) == {"name": "Name is required"}

    state.set_value("name", "R2D2")
    assert _validate(schema, state) == {"name": "Name contains invalid characters"}


def test_date_in_another_component_order_is_not_valid() -> None:
    schema = _schema()
    state = _filled_state(schema)
    state.set_value("birthDate", "1990-07-15")

    assert _validate(schema, state) == {"birthDate": "Not valid"}


def test_cross_field_rule_reads_referenced_value() -> None:
    schema = _schema()
    state = _filled_state(schema)
    state.toggle_multi_choice("selectedModels", "ChatGPT")

    assert _validate(schema, state) == {"useCase": "Tell us how you use it"}

    state.set_value("useCase", "Drafting e-mails")
    assert _validate(schema, state) == {}


def test_dynamic_rules_apply_to_materialised_fields_only() -> None:
    schema = _schema(dynamic_rules=[required("Please describe a drawback")])
    state = _filled_state(schema)

    assert _validate(schema, state) == {"modelCons.Claude": "Please describe a drawback"}

    state.set_value("modelCons.ChatGPT", "")
    state.set_value("modelCons.Claude", "Sometimes too cautious")
    assert _validate(schema, state) == {}


def test_dynamic_fields_without_rules_are_optional() -> None:
    schema = _schema()
    state = _filled_state(schema)

    assert state.derive_dynamic_keys() == ["modelCons.Claude"]
    assert _validate(schema, state) == {}


def test_validation_is_recomputed_from_scratch() -> None:
    schema = _schema()
    state = FormState.initialize(schema)
    first = _validate(schema, state)
    first["name"] = "mutated"

    assert _validate(schema, state)["name"] == "Name is required"
