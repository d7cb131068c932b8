"""Field schema declarations for survey forms.

A :class:`SurveySchema` holds the ordered static fields of a form and, when the
form has follow-up questions, the :class:`DynamicSubSchema` that generates one
text field per option selected in a multi-choice field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

TEXT = "text"
DATE = "date"
SINGLE = "single"
MULTISELECT = "multiselect"

FIELD_KINDS: Tuple[str, ...] = (TEXT, DATE, SINGLE, MULTISELECT)
CHOICE_KINDS: Tuple[str, ...] = (SINGLE, MULTISELECT)

DEFAULT_DATE_FORMAT = "%d-%m-%Y"

# strptime directives accepted by ``date_format``, with their strict width.
_DATE_DIRECTIVES: Dict[str, str] = {
    "%d": r"\d{2}",
    "%m": r"\d{2}",
    "%Y": r"\d{4}",
}

RULE_OPERATORS: Tuple[str, ...] = ("equals", "not_equals", "includes", "not_includes")


class SchemaError(ValueError):
    """Raised when a form schema is malformed and cannot be used."""


def is_empty(value: Any) -> bool:
    """Return ``True`` for absent values, empty strings and empty selections."""

    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, set, frozenset)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class Rule:
    """A single validation check for one field.

    ``check`` receives the field value and a mapping with the current values of
    the keys listed in ``references``. It returns ``True`` when the value is
    acceptable.
    """

    name: str
    message: str
    check: Callable[[Any, Mapping[str, Any]], bool]
    references: Tuple[str, ...] = ()

    def passes(self, value: Any, context: Mapping[str, Any]) -> bool:
        return bool(self.check(value, context))


def required(message: str) -> Rule:
    """Rule failing for absent values, empty strings and empty selections."""

    return Rule("required", message, lambda value, _context: not is_empty(value))


def pattern(regex: str, message: str) -> Rule:
    """Rule requiring non-empty string values to fully match ``regex``."""

    try:
        compiled = re.compile(regex)
    except re.error as exc:
        raise SchemaError(f"Invalid pattern {regex!r}: {exc}") from exc

    def _check(value: Any, _context: Mapping[str, Any]) -> bool:
        if is_empty(value):
            return True
        return isinstance(value, str) and compiled.fullmatch(value) is not None

    return Rule("pattern", message, _check)


def _strict_date_regex(fmt: str) -> "re.Pattern[str]":
    parts: List[str] = []
    index = 0
    while index < len(fmt):
        token = fmt[index:index + 2]
        if token in _DATE_DIRECTIVES:
            parts.append(_DATE_DIRECTIVES[token])
            index += 2
            continue
        if fmt[index] == "%":
            raise SchemaError(f"Unsupported date directive {token!r} in format {fmt!r}.")
        parts.append(re.escape(fmt[index]))
        index += 1
    return re.compile("".join(parts))


def date_format(message: str, fmt: str = DEFAULT_DATE_FORMAT) -> Rule:
    """Rule accepting only dates written exactly in ``fmt``.

    Day and month must be zero-padded and the year must have four
    digits. Dates written in another component order fail even when they name
    the same day.
    """

    layout = _strict_date_regex(fmt)

    def _check(value: Any, _context: Mapping[str, Any]) -> bool:
        if is_empty(value):
            return True
        if not isinstance(value, str) or layout.fullmatch(value) is None:
            return False
        try:
            datetime.strptime(value, fmt)
        except ValueError:
            return False
        return True

    return Rule("date", message, _check)


def one_of(options: Iterable[str], message: str) -> Rule:
    """Rule requiring the value (or every selected value) to be a known option."""

    allowed = frozenset(options)

    def _check(value: Any, _context: Mapping[str, Any]) -> bool:
        if is_empty(value):
            return True
        if isinstance(value, (list, tuple, set, frozenset)):
            return all(item in allowed for item in value)
        return value in allowed

    return Rule("one_of", message, _check)


def _clause_matches(operator: str, actual: Any, expected: Any) -> bool:
    if operator == "equals":
        return actual == expected
    if operator == "not_equals":
        return actual != expected
    if operator == "includes":
        if actual is None:
            return False
        if isinstance(actual, (list, tuple, set, frozenset)):
            return expected in actual
        return actual == expected
    if actual is None:
        return True
    if isinstance(actual, (list, tuple, set, frozenset)):
        return expected not in actual
    return actual != expected


def required_when(field_key: str, operator: str, expected: Any, message: str) -> Rule:
    """Rule making a field required while another field matches ``expected``."""

    if operator not in RULE_OPERATORS:
        raise SchemaError(f"Unsupported rule operator: {operator!r}.")

    def _check(value: Any, context: Mapping[str, Any]) -> bool:
        if not _clause_matches(operator, context.get(field_key), expected):
            return True
        return not is_empty(value)

    return Rule("required_when", message, _check, references=(field_key,))


@dataclass(frozen=True)
class FieldSchema:
    """Static declaration of a single form field."""

    key: str
    kind: str = TEXT
    label: str = ""
    options: Tuple[str, ...] = ()
    rules: Tuple[Rule, ...] = ()
    default: Any = None
    help: Optional[str] = None
    placeholder: Optional[str] = None
    multiline: bool = False

    @property
    def is_choice(self) -> bool:
        return self.kind in CHOICE_KINDS

    def initial_value(self) -> Any:
        """Return the value a new form starts with."""

        if self.kind == MULTISELECT:
            return []
        return self.default


@dataclass(frozen=True)
class DynamicSubSchema:
    """Follow-up text fields generated from a multi-choice field.

    One field exists per selected option of ``source_field``; its key is
    ``key_template`` formatted with the option.
    """

    source_field: str
    key_template: str
    answers_key: str
    label_template: str = "{option}"
    rules: Tuple[Rule, ...] = ()

    def key_for(self, option: str) -> str:
        return self.key_template.format(option=option)

    def label_for(self, option: str) -> str:
        return self.label_template.format(option=option)


@dataclass(frozen=True)
class SurveySchema:
    """Registry of the fields making up one survey form."""

    key: str
    fields: Tuple[FieldSchema, ...]
    dynamic: Optional[DynamicSubSchema] = None
    label: str = ""
    _by_key: Dict[str, FieldSchema] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_key: Dict[str, FieldSchema] = {}
        for entry in self.fields:
            _check_field(entry)
            if entry.key in by_key:
                raise SchemaError(f"Duplicate field key: {entry.key!r}.")
            by_key[entry.key] = entry
        object.__setattr__(self, "_by_key", by_key)

        if self.dynamic is not None:
            self._check_dynamic(self.dynamic)

        for entry in self.fields:
            self._check_references(entry.key, entry.rules)
        if self.dynamic is not None:
            self._check_references(self.dynamic.source_field, self.dynamic.rules)

    def _check_dynamic(self, dynamic: DynamicSubSchema) -> None:
        source = self._by_key.get(dynamic.source_field)
        if source is None:
            raise SchemaError(f"Dynamic source field {dynamic.source_field!r} does not exist.")
        if source.kind != MULTISELECT:
            raise SchemaError(
                f"Dynamic source field {dynamic.source_field!r} must be a {MULTISELECT!r} field."
            )
        if "{option}" not in dynamic.key_template:
            raise SchemaError("Dynamic key template must contain an '{option}' placeholder.")
        for option in source.options:
            try:
                dynamic.key_for(option)
                dynamic.label_for(option)
            except (KeyError, IndexError, ValueError) as exc:
                raise SchemaError(
                    f"Dynamic templates may only use the {{option}} placeholder: {exc!r}"
                ) from exc
        if dynamic.answers_key in self._by_key:
            raise SchemaError(f"Dynamic answers key {dynamic.answers_key!r} clashes with a field.")
        for option in source.options:
            dynamic_key = dynamic.key_for(option)
            if dynamic_key in self._by_key:
                raise SchemaError(f"Dynamic field key {dynamic_key!r} clashes with a static field.")

    def _check_references(self, owner: str, rules: Sequence[Rule]) -> None:
        for rule in rules:
            for reference in rule.references:
                if reference not in self._by_key:
                    raise SchemaError(
                        f"Rule {rule.name!r} on {owner!r} references unknown field {reference!r}."
                    )

    def get_static_fields(self) -> Tuple[FieldSchema, ...]:
        return self.fields

    def get_dynamic_sub_schema(self) -> Optional[DynamicSubSchema]:
        return self.dynamic

    def get_field(self, key: str) -> Optional[FieldSchema]:
        return self._by_key.get(key)

    def dynamic_option_for(self, key: str) -> Optional[str]:
        """Return the option whose follow-up field is named ``key``, if any."""

        if self.dynamic is None:
            return None
        source = self._by_key[self.dynamic.source_field]
        for option in source.options:
            if self.dynamic.key_for(option) == key:
                return option
        return None


def _check_field(entry: FieldSchema) -> None:
    if not isinstance(entry.key, str) or not entry.key:
        raise SchemaError("Every field needs a non-empty string key.")
    if entry.kind not in FIELD_KINDS:
        raise SchemaError(f"Field {entry.key!r} has unsupported type {entry.kind!r}.")
    if not entry.is_choice:
        if entry.options:
            raise SchemaError(f"Field {entry.key!r} declares options but is not a choice field.")
        return
    if not entry.options:
        raise SchemaError(f"Choice field {entry.key!r} has no options configured.")
    if len(set(entry.options)) != len(entry.options):
        raise SchemaError(f"Choice field {entry.key!r} has duplicate options.")
    if entry.kind == SINGLE:
        if entry.default is not None and entry.default not in entry.options:
            raise SchemaError(f"Default of {entry.key!r} is not one of its options.")
    elif entry.default not in (None, [], ()):
        raise SchemaError(f"Multi-choice field {entry.key!r} must start with an empty selection.")


__all__ = [
    "CHOICE_KINDS",
    "DATE",
    "DEFAULT_DATE_FORMAT",
    "DynamicSubSchema",
    "FIELD_KINDS",
    "FieldSchema",
    "MULTISELECT",
    "RULE_OPERATORS",
    "Rule",
    "SINGLE",
    "SchemaError",
    "SurveySchema",
    "TEXT",
    "date_format",
    "is_empty",
    "one_of",
    "pattern",
    "required",
    "required_when",
]
