"""
Tests for single-key joins: attach_children, attach_child and join_by_selectors.
"""

import copy

import pytest

from record_joins import (
    Cardinality,
    CardinalityError,
    InvalidKeyError,
    MissingFieldError,
    attach_child,
    attach_children,
    join_by_selectors,
)


class TestAttachChildren:
    """Test one-to-many attachment."""

    def test_attaches_matching_children(self, users, orders):
        result = attach_children(users, orders, "id", "userId", "orders")
        assert [[o["id"] for o in u["orders"]] for u in result] == [[101, 102], [103], []]

    def test_unmatched_parent_gets_fresh_empty_list(self, users, orders):
        result = attach_children(users, orders, "id", "userId", "orders")
        assert result[2]["orders"] == []
        result[2]["orders"].append("x")
        again = attach_children(users, orders, "id", "userId", "orders")
        assert again[2]["orders"] == []

    def test_parent_lists_are_independent(self):
        parents = [{"id": 1}, {"id": 1}]
        children = [{"pid": 1, "v": "a"}]
        result = attach_children(parents, children, "id", "pid", "kids")
        assert result[0]["kids"] is not result[1]["kids"]
        assert result[0]["kids"][0] is children[0]

    def test_preserves_parent_order_and_fields(self, users, orders):
        result = attach_children(users, orders, "id", "userId", "orders")
        assert [u["name"] for u in result] == ["Ana", "Juan", "Luis"]
        assert all(u.keys() >= {"id", "name", "role"} for u in result)

    def test_inputs_are_not_mutated(self, users, orders):
        users_before = copy.deepcopy(users)
        orders_before = copy.deepcopy(orders)
        attach_children(users, orders, "id", "userId", "orders")
        assert users == users_before
        assert orders == orders_before

    def test_output_records_are_new(self, users, orders):
        result = attach_children(users, orders, "id", "userId", "orders")
        assert all(out is not src for out, src in zip(result, users))

    def test_existing_field_is_shadowed_in_output_only(self):
        parents = [{"id": 1, "orders": "old"}]
        result = attach_children(parents, [{"pid": 1}], "id", "pid", "orders")
        assert result[0]["orders"] == [{"pid": 1}]
        assert parents[0]["orders"] == "old"

    def test_empty_parents(self, orders):
        assert attach_children([], orders, "id", "userId", "orders") == []

    def test_empty_children(self, users):
        result = attach_children(users, [], "id", "userId", "orders")
        assert [u["orders"] for u in result] == [[], [], []]

    def test_missing_parent_field(self, orders):
        with pytest.raises(MissingFieldError):
            attach_children([{"name": "x"}], orders, "id", "userId", "orders")

    def test_missing_child_field(self, users):
        with pytest.raises(MissingFieldError):
            attach_children(users, [{"id": 1}], "id", "userId", "orders")

    def test_none_keys_match_each_other(self):
        parents = [{"id": None}]
        children = [{"pid": None, "v": 1}]
        result = attach_children(parents, children, "id", "pid", "kids")
        assert result[0]["kids"] == children

    def test_unhashable_child_key(self, users):
        with pytest.raises(InvalidKeyError):
            attach_children(users, [{"userId": [1]}], "id", "userId", "orders")


class TestAttachChild:
    """Test one-to-one attachment."""

    def test_first_child_wins(self, users, addresses):
        result = attach_child(users, addresses, "id", "userId", "address")
        assert result[0]["address"]["city"] == "Madrid"
        assert result[1]["address"] is None
        assert result[2]["address"]["city"] == "Bilbao"

    def test_attached_child_is_the_original_record(self, users, addresses):
        result = attach_child(users, addresses, "id", "userId", "address")
        assert result[0]["address"] is addresses[0]

    def test_empty_children(self, users):
        result = attach_child(users, [], "id", "userId", "address")
        assert [u["address"] for u in result] == [None, None, None]


class TestJoinBySelectors:
    """Test joins on computed keys."""

    @pytest.fixture
    def catalog(self):
        return [{"sku": "ABC-123"}, {"sku": "XYZ-789"}]

    @pytest.fixture
    def reviews(self):
        return [
            {"productCode": "abc-123", "rating": 5},
            {"productCode": "abc-123", "rating": 3},
        ]

    def test_many_mode(self, catalog, reviews):
        result = join_by_selectors(
            catalog, reviews,
            parent_selector=lambda p: p["sku"].lower(),
            child_selector=lambda r: r["productCode"],
            as_="reviews",
        )
        assert [len(p["reviews"]) for p in result] == [2, 0]

    def test_one_mode(self, catalog, reviews):
        result = join_by_selectors(
            catalog, reviews,
            parent_selector=lambda p: p["sku"].lower(),
            child_selector=lambda r: r["productCode"],
            as_="review",
            mode="one",
        )
        assert result[0]["review"]["rating"] == 5
        assert result[1]["review"] is None

    def test_enum_mode(self, catalog, reviews):
        by_string = join_by_selectors(
            catalog, reviews, lambda p: p["sku"].lower(), lambda r: r["productCode"],
            "review", mode="one",
        )
        by_enum = join_by_selectors(
            catalog, reviews, lambda p: p["sku"].lower(), lambda r: r["productCode"],
            "review", mode=Cardinality.ONE,
        )
        assert by_string == by_enum

    def test_unknown_mode(self, catalog, reviews):
        with pytest.raises(CardinalityError):
            join_by_selectors(catalog, reviews, lambda p: p, lambda r: r, "x", mode="several")

    def test_matches_field_joins(self, users, orders):
        by_selector = join_by_selectors(
            users, orders, lambda u: u["id"], lambda o: o["userId"], "orders",
        )
        assert by_selector == attach_children(users, orders, "id", "userId", "orders")

    def test_tuple_keys(self):
        parents = [{"a": 1, "b": 2}]
        children = [{"x": 1, "y": 2, "v": "hit"}, {"x": 2, "y": 1, "v": "miss"}]
        result = join_by_selectors(
            parents, children,
            lambda p: (p["a"], p["b"]), lambda c: (c["x"], c["y"]), "matches",
        )
        assert [c["v"] for c in result[0]["matches"]] == ["hit"]
