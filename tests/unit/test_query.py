"""Tests for query constraints and the structured query compiler."""

import pytest

from firestore_rest.query import (
    FieldFilter,
    QueryConstraints,
    compile_query,
    map_direction,
    map_operator,
)


class TestOperators:
    """Operator and direction mapping."""

    @pytest.mark.parametrize(
        ("symbol", "expected"),
        [
            ("==", "EQUAL"),
            ("!=", "NOT_EQUAL"),
            ("<", "LESS_THAN"),
            ("<=", "LESS_THAN_OR_EQUAL"),
            (">", "GREATER_THAN"),
            (">=", "GREATER_THAN_OR_EQUAL"),
            ("array-contains", "ARRAY_CONTAINS"),
            ("in", "IN"),
            ("array-contains-any", "ARRAY_CONTAINS_ANY"),
            ("not-in", "NOT_IN"),
        ],
    )
    def test_map_operator(self, symbol: str, expected: str) -> None:
        assert map_operator(symbol) == expected

    def test_unknown_operator_passes_through(self) -> None:
        assert map_operator("IS_NAN") == "IS_NAN"

    def test_map_direction(self) -> None:
        assert map_direction("asc") == "ASCENDING"
        assert map_direction("DESC") == "DESCENDING"
        assert map_direction(None) == "ASCENDING"
        assert map_direction("DESCENDING") == "DESCENDING"


class TestQueryConstraints:
    """QueryConstraints must never change in place."""

    def test_with_filter_returns_new_instance(self) -> None:
        base = QueryConstraints()
        filtered = base.with_filter("category", "==", "A")

        assert base.filters == ()
        assert filtered.filters == (FieldFilter("category", "==", "A"),)

    def test_chained_filters_accumulate_in_order(self) -> None:
        constraints = (
            QueryConstraints()
            .with_filter("a", "==", 1)
            .with_filter("b", ">", 2)
        )
        assert [f.field for f in constraints.filters] == ["a", "b"]

    def test_order_limit_offset(self) -> None:
        constraints = (
            QueryConstraints().with_order_by("price", "desc").with_limit(5).with_offset(10)
        )

        assert constraints.order_by == "price"
        assert constraints.direction == "desc"
        assert constraints.limit == 5
        assert constraints.offset == 10


class TestCompileQuery:
    """Test compile_query."""

    def test_no_filters_has_no_where(self) -> None:
        result = compile_query("items")

        assert "where" not in result
        assert result["from"] == [{"collectionId": "items", "allDescendants": False}]

    def test_single_filter_is_bare_field_filter(self) -> None:
        constraints = QueryConstraints().with_filter("category", "==", "A")

        result = compile_query("items", constraints)

        assert result["where"] == {
            "fieldFilter": {
                "field": {"fieldPath": "category"},
                "op": "EQUAL",
                "value": {"stringValue": "A"},
            }
        }

    def test_multiple_filters_are_composite_and(self) -> None:
        constraints = (
            QueryConstraints()
            .with_filter("price", ">=", 100)
            .with_filter("stock", "==", True)
            .with_filter("category", "in", ["A", "B"])
        )

        result = compile_query("items", constraints)

        composite = result["where"]["compositeFilter"]
        assert composite["op"] == "AND"
        assert len(composite["filters"]) == 3
        assert [f["fieldFilter"]["op"] for f in composite["filters"]] == [
            "GREATER_THAN_OR_EQUAL",
            "EQUAL",
            "IN",
        ]
        assert composite["filters"][0]["fieldFilter"]["value"] == {"integerValue": "100"}
        assert composite["filters"][2]["fieldFilter"]["value"] == {
            "arrayValue": {"values": [{"stringValue": "A"}, {"stringValue": "B"}]}
        }

    def test_all_descendants(self) -> None:
        result = compile_query("items", all_descendants=True)
        assert result["from"] == [{"collectionId": "items", "allDescendants": True}]

    def test_order_by(self) -> None:
        result = compile_query("items", QueryConstraints().with_order_by("price", "desc"))
        assert result["orderBy"] == [
            {"field": {"fieldPath": "price"}, "direction": "DESCENDING"}
        ]

    def test_order_by_defaults_to_ascending(self) -> None:
        result = compile_query("items", QueryConstraints().with_order_by("price"))
        assert result["orderBy"][0]["direction"] == "ASCENDING"

    def test_limit_and_offset(self) -> None:
        result = compile_query(
            "items", QueryConstraints().with_limit(10).with_offset(20)
        )
        assert result["limit"] == 10
        assert result["offset"] == 20

    def test_zero_limit_and_offset_are_omitted(self) -> None:
        result = compile_query("items", QueryConstraints(limit=0, offset=0))
        assert "limit" not in result
        assert "offset" not in result
