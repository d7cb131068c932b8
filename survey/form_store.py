"""Helpers for loading survey form schema files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from survey.schema import (
    FIELD_KINDS,
    DEFAULT_DATE_FORMAT,
    DynamicSubSchema,
    FieldSchema,
    Rule,
    SchemaError,
    SurveySchema,
    date_format,
    one_of,
    pattern,
    required,
    required_when,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
FORM_SCHEMA_FILENAME = "form_schema.json"
SCHEMAS_ROOT = PROJECT_ROOT / "form_schemas"


def _ensure_mapping(value: Any) -> Dict[str, Any]:
    """Return ``value`` if it is a mapping, otherwise an empty dict."""

    return dict(value) if isinstance(value, Mapping) else {}


def _ensure_list(value: Any) -> List[Any]:
    """Return ``value`` if it is a list, otherwise an empty list."""

    return list(value) if isinstance(value, list) else []


def discover_local_forms(root: Optional[Path] = None) -> Dict[str, Path]:
    """Return a mapping of ``form_key -> path`` for local schema files."""

    root = SCHEMAS_ROOT if root is None else root
    forms: Dict[str, Path] = {}
    if root.exists():
        for entry in sorted(root.iterdir()):
            if not entry.is_dir():
                continue
            schema_path = entry / FORM_SCHEMA_FILENAME
            if schema_path.exists():
                forms[entry.name] = schema_path
    return forms


def available_form_keys(root: Optional[Path] = None) -> List[str]:
    """Return the list of known form identifiers."""

    return list(discover_local_forms(root).keys())


def _build_rule(owner: str, payload: Any) -> Rule:
    """Convert a rule entry from a schema file into a :class:`Rule`."""

    entry = _ensure_mapping(payload)
    rule_type = entry.get("type")
    message = str(entry.get("message") or "").strip()
    if not message:
        raise SchemaError(f"Rule {rule_type!r} on {owner!r} needs a message.")

    if rule_type == "required":
        return required(message)
    if rule_type == "pattern":
        regex = entry.get("value")
        if not isinstance(regex, str) or not regex:
            raise SchemaError(f"Pattern rule on {owner!r} needs a 'value'.")
        return pattern(regex, message)
    if rule_type == "date":
        return date_format(message, str(entry.get("format") or DEFAULT_DATE_FORMAT))
    if rule_type == "one_of":
        return one_of([str(item) for item in _ensure_list(entry.get("options"))], message)
    if rule_type == "required_when":
        field_key = entry.get("field")
        if not isinstance(field_key, str) or not field_key:
            raise SchemaError(f"Rule 'required_when' on {owner!r} needs a 'field'.")
        return required_when(
            field_key,
            str(entry.get("operator") or "equals"),
            entry.get("value"),
            message,
        )
    raise SchemaError(f"Unsupported rule type {rule_type!r} on {owner!r}.")


def _build_field(payload: Any) -> FieldSchema:
    entry = _ensure_mapping(payload)
    key = entry.get("key")
    if not isinstance(key, str) or not key.strip():
        raise SchemaError("Every field needs a non-empty 'key'.")
    key = key.strip()
    kind = entry.get("type", "text")
    if kind not in FIELD_KINDS:
        raise SchemaError(f"Field {key!r} has unsupported type {kind!r}.")

    options = tuple(str(option) for option in _ensure_list(entry.get("options")))
    rules = tuple(_build_rule(key, rule) for rule in _ensure_list(entry.get("rules")))
    return FieldSchema(
        key=key,
        kind=kind,
        label=str(entry.get("label") or key).strip() or key,
        options=options,
        rules=rules,
        default=entry.get("default"),
        help=entry.get("help"),
        placeholder=entry.get("placeholder"),
        multiline=bool(entry.get("multiline", False)),
    )


def _build_dynamic(payload: Any) -> Optional[DynamicSubSchema]:
    entry = _ensure_mapping(payload)
    if not entry:
        return None
    source = entry.get("source")
    if not isinstance(source, str) or not source:
        raise SchemaError("Dynamic block needs a 'source' field.")
    answers_key = str(entry.get("answers_key") or f"{source}Details")
    key_template = str(entry.get("key_template") or f"{answers_key}.{{option}}")
    rules = tuple(_build_rule(key_template, rule) for rule in _ensure_list(entry.get("rules")))
    return DynamicSubSchema(
        source_field=source,
        key_template=key_template,
        answers_key=answers_key,
        label_template=str(entry.get("label_template") or "{option}"),
        rules=rules,
    )


def schema_from_payload(form_key: str, payload: Mapping[str, Any]) -> SurveySchema:
    """Build a :class:`SurveySchema` from a decoded schema file."""

    fields = tuple(_build_field(entry) for entry in _ensure_list(payload.get("fields")))
    if not fields:
        raise SchemaError(f"Form {form_key!r} has no fields.")
    label = str(payload.get("label") or form_key).strip() or form_key
    return SurveySchema(
        key=form_key,
        fields=fields,
        dynamic=_build_dynamic(payload.get("dynamic")),
        label=label,
    )


def load_form_schema(form_key: str, root: Optional[Path] = None) -> SurveySchema:
    """Load and build the schema stored for ``form_key``."""

    forms = discover_local_forms(root)
    if form_key not in forms:
        raise SchemaError(f"No schema file found for form {form_key!r}.")
    path = forms[form_key]
    with path.open("r", encoding="utf-8") as handle:
        try:
            payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise SchemaError(f"Schema file {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise SchemaError(f"Schema file {path} must contain a JSON object.")
    schema = schema_from_payload(form_key, payload)
    logger.info("Loaded form %s with %d field(s) from %s", form_key, len(schema.fields), path)
    return schema


def load_local_forms(root: Optional[Path] = None) -> Tuple[Dict[str, SurveySchema], Dict[str, Path]]:
    """Load every local form, returning schemas and their source paths."""

    forms = discover_local_forms(root)
    schemas = {form_key: load_form_schema(form_key, root) for form_key in forms}
    return schemas, forms


__all__ = [
    "FORM_SCHEMA_FILENAME",
    "SCHEMAS_ROOT",
    "available_form_keys",
    "discover_local_forms",
    "load_form_schema",
    "load_local_forms",
    "schema_from_payload",
]
