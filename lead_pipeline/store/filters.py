"""Evaluation of filter rules against stored business records."""

from __future__ import annotations

import json
from typing import Any

from lead_pipeline.models import FilterRule


def _as_rule_value(value: Any) -> str:
    """Render a stored value the way rule values are written (``"true"``, ``"4.5"``)."""
    if isinstance(value, str):
        return value
    return json.dumps(value)


def rule_matches(record: dict[str, Any], rule: FilterRule) -> bool:
    value = record.get(rule.field)
    exists = value is not None

    if rule.operator == "EXISTS":
        return exists
    if rule.operator == "NOT_EXISTS":
        return not exists

    equals = exists and _as_rule_value(value) == rule.value
    if rule.operator == "EQUALS":
        return equals
    return not equals


def matches(record: dict[str, Any], rules: list[FilterRule]) -> bool:
    """True when every rule holds (an empty rule list matches everything)."""
    return all(rule_matches(record, rule) for rule in rules)


def flag_is(field: str, value: bool = True) -> FilterRule:
    return FilterRule(field=field, operator="EQUALS", value=value)


def flag_is_not(field: str, value: bool = True) -> FilterRule:
    return FilterRule(field=field, operator="NOT_EQUALS", value=value)
