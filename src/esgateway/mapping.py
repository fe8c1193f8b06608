"""
esgateway Mapping — Field Mapping Builders
==========================================

Small helpers for writing field mappings as Python dicts:

    mapping = type_mapping({
        "id": long_field(),
        "group": text_field(fielddata=True),
        "user": nested_field({
            "first": keyword_field(),
            "last": keyword_field(),
        }),
    })

A field declared with ``nested_field`` gets its own matching scope: its
sub-fields are only reachable through a ``nested`` query on its path.
"""

from typing import Any, Dict, Optional

FieldMapping = Dict[str, Any]


def long_field(index: bool = True) -> FieldMapping:
    return {"type": "long", "index": index}


def integer_field(index: bool = True) -> FieldMapping:
    return {"type": "integer", "index": index}


def double_field(index: bool = True) -> FieldMapping:
    return {"type": "double", "index": index}


def text_field(
    fielddata: bool = False,
    positions: bool = False,
    analyzer: Optional[str] = None
) -> FieldMapping:
    """
    Analyzed text field.

    Args:
        fielddata: Allow sorting/aggregating on the analyzed terms
        positions: Store offsets as well (``index_options: offsets``)
        analyzer: Analyzer name (engine default when None)
    """
    field: FieldMapping = {"type": "text"}
    if fielddata:
        field["fielddata"] = True
    if positions:
        field["index_options"] = "offsets"
    if analyzer:
        field["analyzer"] = analyzer
    return field


def keyword_field(index: bool = True) -> FieldMapping:
    return {"type": "keyword", "index": index}


def date_field(format: Optional[str] = None) -> FieldMapping:
    field: FieldMapping = {"type": "date"}
    if format:
        field["format"] = format
    return field


def object_field(properties: Dict[str, FieldMapping]) -> FieldMapping:
    return {"type": "object", "properties": dict(properties)}


def nested_field(properties: Dict[str, FieldMapping]) -> FieldMapping:
    return {"type": "nested", "properties": dict(properties)}


def type_mapping(properties: Dict[str, FieldMapping]) -> FieldMapping:
    """Top-level mapping body for ``IndexManager.create``."""
    return {"properties": dict(properties)}
