"""SQL predicates shared by the lenient list queries."""
from __future__ import annotations

import math

from sqlalchemy import ColumnElement, false


def column_equals(column, value: str) -> ColumnElement[bool]:
    """Equality against a plain or enum-typed column.

    Enum columns only accept declared values, so an unknown value becomes an
    always-false predicate instead of a bind error.
    """

    enum_class = getattr(column.type, "enum_class", None)
    if enum_class is None:
        return column == value
    try:
        member = enum_class(value)
    except ValueError:
        return false()
    return column == member


def price_bounds(column, min_price: float | None, max_price: float | None) -> list[ColumnElement[bool]]:
    """Inclusive bounds on a whole-number price; fractional bounds round inwards."""

    conditions: list[ColumnElement[bool]] = []
    if min_price is not None:
        conditions.append(column >= math.ceil(min_price))
    if max_price is not None:
        conditions.append(column <= math.floor(max_price))
    return conditions
