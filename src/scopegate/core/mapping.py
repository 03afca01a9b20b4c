"""Mapping flattening — nested field mappings to a flat leaf-field list."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from scopegate.models.mapping import MappingField

OBJECT_TYPE = "object"


def flatten_properties(properties: Mapping[str, Any] | None) -> list[MappingField]:
    """Flatten a ``properties`` tree into leaf fields.

    Container nodes (type ``object``, the default when no type is declared)
    are recursed into but not returned. The result is deduplicated by path and
    sorted by path.

    >>> [(f.path, f.type) for f in flatten_properties(
    ...     {"a": {"type": "keyword"}, "b": {"properties": {"c": {"type": "date"}}}}
    ... )]
    [('a', 'keyword'), ('b.c', 'date')]
    """
    fields: dict[str, MappingField] = {}
    _collect(properties, "", fields)
    return [fields[path] for path in sorted(fields)]


def flatten_mapping(response: Mapping[str, Any] | None) -> list[MappingField]:
    """Flatten a get-mapping response covering one or more indices.

    The response is keyed by index name, each carrying
    ``{"mappings": {"properties": {...}}}``. Fields present in several indices
    are reported once, with the type seen first.
    """
    fields: dict[str, MappingField] = {}
    for index_data in (response or {}).values():
        if not isinstance(index_data, Mapping):
            continue
        mappings = index_data.get("mappings") or {}
        _collect(mappings.get("properties"), "", fields)
    return [fields[path] for path in sorted(fields)]


def _collect(properties: Mapping[str, Any] | None, parent: str, fields: dict[str, MappingField]) -> None:
    if not properties:
        return
    for key, node in properties.items():
        if not isinstance(node, Mapping):
            continue
        path = f"{parent}.{key}" if parent else key
        field_type = node.get("type") or OBJECT_TYPE

        if field_type != OBJECT_TYPE and path not in fields:
            fields[path] = MappingField(path=path, type=field_type, is_leaf=True)

        if node.get("properties"):
            _collect(node["properties"], path, fields)
