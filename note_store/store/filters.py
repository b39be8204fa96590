"""Equality filter helpers for JSON document queries."""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.sql.elements import ClauseElement

# Checked in order: bool is a subclass of int.
_SUPPORTED_VALUE_TYPES: tuple[tuple[type, str], ...] = (
    (bool, "as_boolean"),
    (int, "as_integer"),
    (float, "as_float"),
    (str, "as_string"),
)


def split_field_path(field: str) -> list[str]:
    """Split a dotted field name into JSON path segments."""
    segments = [segment for segment in field.split(".") if segment]
    if not segments:
        raise ValueError("Field path cannot be empty.")
    return segments


def _json_path(column: ClauseElement, segments: Sequence[str]) -> ClauseElement:
    expression = column
    for segment in segments:
        expression = expression[int(segment)] if segment.isdigit() else expression[segment]
    return expression


def _typed_accessor(expression: ClauseElement, value: Any) -> ClauseElement:
    for value_type, accessor in _SUPPORTED_VALUE_TYPES:
        if isinstance(value, value_type):
            return getattr(expression.comparator, accessor)()
    raise TypeError(f"Unsupported filter value type: {type(value).__name__}.")


def build_equality_expression(column: ClauseElement, field: str, value: Any) -> ClauseElement:
    """Construct ``column[field] == value`` with the JSON value cast to ``value``'s type."""
    json_expression = _json_path(column, split_field_path(field))
    return _typed_accessor(json_expression, value) == value


__all__ = ["build_equality_expression", "split_field_path"]
