"""
Cross-operator properties checked over small generated record sets.
"""

import random

import pytest

from record_joins import (
    attach_child,
    attach_child_composite,
    attach_child_nested,
    attach_children,
    attach_children_composite,
    attach_children_nested,
    create_nested_groups,
    get_from_nested_groups,
    group_by,
    group_by_key,
    group_by_many,
)

SEEDS = [0, 1, 7, 42]


def _random_records(seed, count=30):
    rng = random.Random(seed)
    return [
        {
            "id": i,
            "a": rng.choice([1, 2, 3, None]),
            "b": rng.choice(["x", "y", ""]),
            "c": rng.choice([True, False]),
        }
        for i in range(count)
    ]


@pytest.mark.parametrize("seed", SEEDS)
class TestGroupingProperties:
    """Grouping is a partition that preserves order."""

    def test_groups_partition_the_input(self, seed):
        records = _random_records(seed)
        groups = group_by_key(records, "a")
        flattened = sorted(r["id"] for group in groups.values() for r in group)
        assert flattened == [r["id"] for r in records]

    def test_regrouping_the_groups_is_idempotent(self, seed):
        records = _random_records(seed)
        for field in ("a", "b", "c"):
            groups = group_by_key(records, field)
            flattened = [r for group in groups.values() for r in group]
            regrouped = group_by_key(flattened, field)
            assert regrouped == groups
            assert list(regrouped) == list(groups)

    def test_group_order_follows_input(self, seed):
        records = _random_records(seed)
        for group in group_by_key(records, "b").values():
            ids = [r["id"] for r in group]
            assert ids == sorted(ids)

    def test_keys_in_first_seen_order(self, seed):
        records = _random_records(seed)
        first_seen = list(dict.fromkeys(r["a"] for r in records))
        assert list(group_by_key(records, "a")) == first_seen

    def test_grouping_is_deterministic(self, seed):
        records = _random_records(seed)
        assert group_by_many(records, ["a", "b"]) == group_by_many(records, ["a", "b"])

    def test_nested_index_agrees_with_flat_grouping(self, seed):
        records = _random_records(seed)
        tree = create_nested_groups(records, ["a", "b"])
        expected = group_by(records, lambda r: (r["a"], r["b"]))
        for (a, b), group in expected.items():
            assert get_from_nested_groups(tree, [a, b]) == group

    def test_group_by_many_recomposes(self, seed):
        records = _random_records(seed)
        tree = group_by_many(records, ["a", "b"])
        for a, subtree in tree.items():
            assert subtree == group_by_key(group_by_key(records, "a")[a], "b")


@pytest.mark.parametrize("seed", SEEDS)
class TestJoinProperties:
    """Joins keep every parent and attach exactly the matching children."""

    def test_many_and_one_agree(self, seed):
        parents = _random_records(seed, 10)
        children = _random_records(seed + 100)
        many = attach_children(parents, children, "a", "a", "kids")
        one = attach_child(parents, children, "a", "a", "kid")
        for m, o in zip(many, one):
            assert o["kid"] == (m["kids"][0] if m["kids"] else None)

    def test_every_parent_once_in_order(self, seed):
        parents = _random_records(seed, 10)
        children = _random_records(seed + 100)
        result = attach_children(parents, children, "a", "a", "kids")
        assert [p["id"] for p in result] == [p["id"] for p in parents]

    def test_attached_children_are_exactly_the_matches(self, seed):
        parents = _random_records(seed, 10)
        children = _random_records(seed + 100)
        for parent in attach_children(parents, children, "a", "a", "kids"):
            assert parent["kids"] == [c for c in children if c["a"] == parent["a"]]

    def test_composite_strategies_agree(self, seed):
        parents = _random_records(seed, 10)
        children = _random_records(seed + 100)
        keys = ["a", "b", "c"]
        assert attach_children_composite(parents, children, keys, keys, "kids") == \
            attach_children_nested(parents, children, keys, keys, "kids")
        assert attach_child_composite(parents, children, keys, keys, "kid") == \
            attach_child_nested(parents, children, keys, keys, "kid")

    def test_join_is_repeatable(self, seed):
        parents = _random_records(seed, 10)
        children = _random_records(seed + 100)
        once = attach_children(parents, children, "a", "a", "kids")
        twice = attach_children(parents, children, "a", "a", "kids")
        assert once == twice
