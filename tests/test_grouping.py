"""
Tests for the grouping operators.
"""

import pytest

from record_joins import (
    InvalidKeyError,
    MissingFieldError,
    create_nested_groups,
    group_by,
    group_by_composite,
    group_by_key,
    group_by_many,
    group_by_transform,
)


class TestGroupBy:
    """Test group_by with key selector functions."""

    def test_groups_by_selector(self, users):
        result = group_by(users, lambda u: u["role"])
        assert list(result) == ["admin", "user"]
        assert [u["name"] for u in result["admin"]] == ["Ana", "Luis"]
        assert [u["name"] for u in result["user"]] == ["Juan"]

    def test_empty_input(self):
        assert group_by([], lambda r: r["x"]) == {}

    def test_keys_in_first_seen_order(self):
        items = [{"k": "b"}, {"k": "a"}, {"k": "c"}, {"k": "a"}]
        assert list(group_by(items, lambda r: r["k"])) == ["b", "a", "c"]

    def test_records_are_shared_not_copied(self, users):
        result = group_by(users, lambda u: u["role"])
        assert result["admin"][0] is users[0]

    def test_none_is_an_ordinary_key(self):
        items = [{"k": None, "v": 1}, {"k": "x", "v": 2}, {"k": None, "v": 3}]
        result = group_by(items, lambda r: r["k"])
        assert [r["v"] for r in result[None]] == [1, 3]

    def test_integer_and_string_keys_stay_distinct(self):
        items = [{"k": 1}, {"k": "1"}]
        result = group_by(items, lambda r: r["k"])
        assert len(result) == 2

    def test_unhashable_key_raises(self):
        with pytest.raises(InvalidKeyError):
            group_by([{"tags": ["a"]}], lambda r: r["tags"])

    def test_accepts_generators(self, users):
        result = group_by((u for u in users), lambda u: u["role"])
        assert len(result["admin"]) == 2


class TestGroupByKey:
    """Test group_by_key with a named field."""

    def test_matches_selector_form(self, users):
        assert group_by_key(users, "role") == group_by(users, lambda u: u["role"])

    def test_missing_field_raises(self, users):
        with pytest.raises(MissingFieldError) as exc_info:
            group_by_key(users, "team")
        assert exc_info.value.field == "team"

    def test_missing_field_is_a_key_error(self, users):
        with pytest.raises(KeyError):
            group_by_key(users, "team")


class TestGroupByMany:
    """Test nested grouping by multiple fields."""

    def test_two_levels(self, sales):
        result = group_by_many(sales, ["country", "city"])
        assert list(result) == ["USA", "Spain"]
        assert list(result["USA"]) == ["NYC", "LA"]
        assert [s["amount"] for s in result["USA"]["NYC"]] == [100, 300]
        assert [s["amount"] for s in result["Spain"]["Madrid"]] == [150]

    def test_single_field_is_flat(self, sales):
        assert group_by_many(sales, ["country"]) == group_by_key(sales, "country")

    def test_no_fields_returns_input(self, sales):
        assert group_by_many(sales, []) is sales

    def test_agrees_with_nested_index(self, sales):
        fields = ["country", "city", "amount"]
        assert group_by_many(sales, fields) == create_nested_groups(sales, fields)

    def test_empty_input(self):
        assert group_by_many([], ["a", "b"]) == {}


class TestGroupByTransform:
    """Test per-group transforms."""

    def test_sum_per_group(self, orders):
        result = group_by_transform(
            orders, lambda o: o["userId"], lambda g: sum(o["total"] for o in g)
        )
        assert result == {1: 150, 2: 200, 99: 10}

    def test_transform_called_once_per_key_with_ordered_group(self, orders):
        calls = []

        def record_call(group):
            calls.append([o["id"] for o in group])
            return len(group)

        result = group_by_transform(orders, lambda o: o["userId"], record_call)
        assert calls == [[101, 102], [103], [104]]
        assert result == {1: 2, 2: 1, 99: 1}

    def test_empty_input_never_calls_transform(self):
        def fail(group):
            raise AssertionError("transform should not run")

        assert group_by_transform([], lambda r: r, fail) == {}


class TestGroupByComposite:
    """Test flat grouping by a serialized composite key."""

    def test_serialized_keys(self, sales):
        result = group_by_composite(sales, ["country", "city"])
        assert list(result) == ["USA||~~||NYC", "USA||~~||LA", "Spain||~~||Madrid"]
        assert len(result["USA||~~||NYC"]) == 2

    def test_custom_separator(self, sales):
        result = group_by_composite(sales, ["country", "city"], separator="/")
        assert "Spain/Madrid" in result

    def test_none_parts_render_empty(self):
        items = [{"a": None, "b": 1}, {"a": "", "b": 1}]
        result = group_by_composite(items, ["a", "b"])
        assert list(result) == ["||~~||1"]
        assert len(result["||~~||1"]) == 2
