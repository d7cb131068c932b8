"""In-memory answer state for a single survey form instance."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from survey.schema import MULTISELECT, SurveySchema

logger = logging.getLogger(__name__)


class FormState:
    """Current values of one survey form.

    Static field values live in ``values``. Follow-up texts for the dynamic
    sub-schema are stored per option in ``follow_ups``; which of them are
    visible is always derived from the current selection of the source field
    and never stored separately.

    With ``retain_deselected`` (the default) the text typed for an option
    survives deselection and comes back when the option is selected again.
    Without it, the text is discarded as soon as the option is deselected.
    """

    def __init__(self, schema: SurveySchema, *, retain_deselected: bool = True) -> None:
        self.schema = schema
        self.retain_deselected = retain_deselected
        self.values: Dict[str, Any] = {}
        self.follow_ups: Dict[str, str] = {}

    @classmethod
    def initialize(cls, schema: SurveySchema, *, retain_deselected: bool = True) -> "FormState":
        """Return a state holding the schema defaults and no follow-up texts."""

        state = cls(schema, retain_deselected=retain_deselected)
        for entry in schema.get_static_fields():
            state.values[entry.key] = entry.initial_value()
        return state

    def get_value(self, key: str) -> Any:
        if key in self.values:
            value = self.values[key]
            return list(value) if isinstance(value, list) else value
        option = self.schema.dynamic_option_for(key)
        if option is None or option not in self.selected_options():
            return None
        return self.follow_ups.get(option)

    def set_value(self, key: str, value: Any) -> None:
        entry = self.schema.get_field(key)
        if entry is not None:
            if entry.kind == MULTISELECT:
                value = self._normalise_selection(key, value)
            self.values[key] = value
            if self._is_source(key):
                self._selection_changed()
            return

        option = self.schema.dynamic_option_for(key)
        if option is None:
            raise KeyError(f"Unknown field key: {key!r}")
        self.follow_ups[option] = "" if value is None else str(value)

    def toggle_multi_choice(self, field_key: str, option: str) -> None:
        """Select ``option`` if it is not selected, otherwise deselect it."""

        entry = self.schema.get_field(field_key)
        if entry is None or entry.kind != MULTISELECT:
            raise KeyError(f"{field_key!r} is not a multi-choice field.")
        if option not in entry.options:
            raise ValueError(f"{option!r} is not an option of {field_key!r}.")

        current = self.values.get(field_key) or []
        if option in current:
            updated = [item for item in current if item != option]
        else:
            updated = [*current, option]
        self.values[field_key] = self._normalise_selection(field_key, updated)
        if self._is_source(field_key):
            self._selection_changed()

    def selected_options(self) -> List[str]:
        """Return the current selection of the dynamic source field."""

        dynamic = self.schema.get_dynamic_sub_schema()
        if dynamic is None:
            return []
        return list(self.values.get(dynamic.source_field) or [])

    def derive_dynamic_keys(self) -> List[str]:
        """Return the keys of the follow-up fields currently materialised.

        Keys follow the declaration order of the source field's options, not
        the order in which options were selected.
        """

        dynamic = self.schema.get_dynamic_sub_schema()
        if dynamic is None:
            return []
        return [dynamic.key_for(option) for option in self.selected_options()]

    def prune_orphan_dynamic_values(self) -> List[str]:
        """Drop follow-up texts of options that are not selected.

        Returns the options whose text was discarded.
        """

        selected = set(self.selected_options())
        orphans = [option for option in self.follow_ups if option not in selected]
        for option in orphans:
            del self.follow_ups[option]
        if orphans:
            logger.debug("Discarded follow-up answers for %s", ", ".join(orphans))
        return orphans

    def _is_source(self, key: str) -> bool:
        dynamic = self.schema.get_dynamic_sub_schema()
        return dynamic is not None and dynamic.source_field == key

    def _selection_changed(self) -> None:
        if not self.retain_deselected:
            self.prune_orphan_dynamic_values()
        logger.debug("Dynamic fields now %s", self.derive_dynamic_keys())

    def _normalise_selection(self, key: str, value: Optional[Iterable[str]]) -> List[str]:
        entry = self.schema.get_field(key)
        assert entry is not None
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        chosen = set(value)
        unknown = sorted(item for item in chosen if item not in entry.options)
        if unknown:
            logger.warning("Ignoring unknown options for %s: %s", key, ", ".join(map(str, unknown)))
        return [option for option in entry.options if option in chosen]


__all__ = ["FormState"]
