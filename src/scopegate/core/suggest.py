"""Value suggestions — terms aggregations for field-value autocomplete.

Numeric fields cannot be regex-filtered by the cluster, so their suggestions
are fetched wider (100 buckets) and filtered by prefix locally. Other fields
are filtered by the cluster with an escaped ``include`` pattern.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

NUMERIC_FIELD_TYPES = frozenset(
    {"integer", "long", "float", "double", "short", "byte", "half_float", "scaled_float"}
)

MAX_SUGGESTIONS = 20
NUMERIC_FETCH_SIZE = 100
AGGREGATION_NAME = "top_values"

# Lucene regular-expression operators
_REGEX_METACHARACTERS = frozenset('.?+*|{}[]()"\\#@&<>~^$')


def is_numeric_type(field_type: str | None) -> bool:
    return (field_type or "") in NUMERIC_FIELD_TYPES


def escape_regex(text: str) -> str:
    """Backslash-escape every regex operator in ``text``.

    >>> escape_regex("a.b*")
    'a\\\\.b\\\\*'
    """
    return "".join(f"\\{ch}" if ch in _REGEX_METACHARACTERS else ch for ch in text)


def build_values_body(field: str, prefix: str = "", field_type: str | None = None) -> dict[str, Any]:
    """Build the terms-aggregation request body for ``field``."""
    terms: dict[str, Any] = {"field": field}
    if is_numeric_type(field_type):
        terms["size"] = NUMERIC_FETCH_SIZE
    else:
        terms["size"] = MAX_SUGGESTIONS
        if prefix:
            terms["include"] = f"{escape_regex(prefix)}.*"

    return {"size": 0, "aggs": {AGGREGATION_NAME: {"terms": terms}}}


def extract_values(
    payload: Mapping[str, Any],
    prefix: str = "",
    field_type: str | None = None,
) -> list[str | int | float]:
    """Turn a terms-aggregation response into an ordered suggestion list."""
    aggregation = (payload.get("aggregations") or {}).get(AGGREGATION_NAME) or {}
    buckets = aggregation.get("buckets") or []
    values = [_display_value(bucket) for bucket in buckets]

    if is_numeric_type(field_type):
        if prefix:
            values = [v for v in values if _as_text(v).startswith(prefix)]
        numbers = [_as_number(v) for v in values]
        numbers.sort(key=_numeric_sort_key)
        return numbers[:MAX_SUGGESTIONS]

    values.sort(key=lambda v: (_as_text(v).casefold(), _as_text(v)))
    return values[:MAX_SUGGESTIONS]


def _display_value(bucket: Mapping[str, Any]) -> Any:
    formatted = bucket.get("key_as_string")
    return formatted if formatted is not None else bucket.get("key")


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: Any) -> int | float | str:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value
    text = str(value)
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _numeric_sort_key(value: int | float | str) -> tuple[int, float, str]:
    # unparseable values sort after all numbers
    if isinstance(value, str):
        return (1, 0.0, value)
    return (0, float(value), "")
