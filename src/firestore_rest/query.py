"""Structured query constraints and their compilation to the REST payload."""

from dataclasses import dataclass, replace
from typing import Any

from firestore_rest.codec import encode_value

OPERATORS: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "array-contains": "ARRAY_CONTAINS",
    "in": "IN",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
    "not-in": "NOT_IN",
}

DIRECTIONS: dict[str, str] = {
    "asc": "ASCENDING",
    "ascending": "ASCENDING",
    "desc": "DESCENDING",
    "descending": "DESCENDING",
}


def map_operator(op: str) -> str:
    """Translate an operator symbol to its REST name.

    Unknown operators are returned unchanged so newer server operators can
    be used before they are added here.
    """
    return OPERATORS.get(op, op)


def map_direction(direction: str | None) -> str:
    """Translate ``asc``/``desc`` to ASCENDING/DESCENDING."""
    if not direction:
        return "ASCENDING"
    return DIRECTIONS.get(direction.lower(), direction)


@dataclass(frozen=True)
class FieldFilter:
    """A single ``field op value`` condition."""

    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class QueryConstraints:
    """Accumulated filters, ordering and pagination of a query.

    Instances are immutable; the ``with_*`` methods return a copy with one
    constraint added or replaced.
    """

    filters: tuple[FieldFilter, ...] = ()
    order_by: str | None = None
    direction: str = "asc"
    limit: int | None = None
    offset: int | None = None

    def with_filter(self, field_path: str, op: str, value: Any) -> "QueryConstraints":
        return replace(self, filters=(*self.filters, FieldFilter(field_path, op, value)))

    def with_order_by(self, field_path: str, direction: str = "asc") -> "QueryConstraints":
        return replace(self, order_by=field_path, direction=direction)

    def with_limit(self, limit: int) -> "QueryConstraints":
        return replace(self, limit=limit)

    def with_offset(self, offset: int) -> "QueryConstraints":
        return replace(self, offset=offset)


def _field_filter(condition: FieldFilter) -> dict[str, Any]:
    return {
        "fieldFilter": {
            "field": {"fieldPath": condition.field},
            "op": map_operator(condition.op),
            "value": encode_value(condition.value),
        }
    }


def compile_query(
    collection_id: str,
    constraints: QueryConstraints | None = None,
    all_descendants: bool = False,
) -> dict[str, Any]:
    """Build the ``structuredQuery`` object for a runQuery request.

    Args:
        collection_id: Collection ID to select from (last path segment).
        constraints: Filters, ordering and pagination.
        all_descendants: True for a collection group query.

    Returns:
        The structured query (without the ``structuredQuery`` wrapper).
    """
    constraints = constraints or QueryConstraints()

    structured: dict[str, Any] = {
        "from": [{"collectionId": collection_id, "allDescendants": all_descendants}],
    }

    if len(constraints.filters) == 1:
        structured["where"] = _field_filter(constraints.filters[0])
    elif len(constraints.filters) > 1:
        structured["where"] = {
            "compositeFilter": {
                "op": "AND",
                "filters": [_field_filter(f) for f in constraints.filters],
            }
        }

    if constraints.order_by:
        structured["orderBy"] = [
            {
                "field": {"fieldPath": constraints.order_by},
                "direction": map_direction(constraints.direction),
            }
        ]

    # 0 means "not set" for both
    if constraints.limit:
        structured["limit"] = constraints.limit
    if constraints.offset:
        structured["offset"] = constraints.offset

    return structured
