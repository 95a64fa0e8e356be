"""
Single-key joins.

Each join indexes the children once (O(children)) and then makes one pass
over the parents (O(parents)), attaching the matches under a new field.
Parents keep their input order and appear exactly once in the output.
"""

from typing import Any, Callable, Dict, List

from ..cardinality import Cardinality, CardinalityLike
from ..logging_config import configure_logger_for_debug_trace
from ..records import Record, Records, as_records, check_key, enrich, field_getter

logger = configure_logger_for_debug_trace(__name__)

KeySelector = Callable[[Record], Any]


def index_many(children: List[Record], key_selector: KeySelector) -> Dict[Any, List[Record]]:
    """Index children by key, keeping every child per key in input order."""
    index: Dict[Any, List[Record]] = {}
    for child in children:
        key = check_key(key_selector(child), "child key")
        existing = index.get(key)
        if existing is None:
            index[key] = [child]
        else:
            existing.append(child)
    return index


def index_first(children: List[Record], key_selector: KeySelector) -> Dict[Any, Record]:
    """Index children by key, keeping only the first child seen per key."""
    index: Dict[Any, Record] = {}
    for child in children:
        key = check_key(key_selector(child), "child key")
        if key not in index:
            index[key] = child
    return index


def attach_many_by(
    parents: Records,
    children: Records,
    parent_selector: KeySelector,
    child_selector: KeySelector,
    as_: str,
) -> List[Dict[str, Any]]:
    """One-to-many attachment using key selector functions."""
    parent_rows = as_records(parents)
    child_rows = as_records(children)
    children_by_key = index_many(child_rows, child_selector)
    logger.debug(
        "attach many %r: %d parents, %d children, %d keys",
        as_, len(parent_rows), len(child_rows), len(children_by_key),
    )

    result = []
    for parent in parent_rows:
        key = check_key(parent_selector(parent), "parent key")
        result.append(enrich(parent, as_, list(children_by_key.get(key, ()))))
    return result


def attach_one_by(
    parents: Records,
    children: Records,
    parent_selector: KeySelector,
    child_selector: KeySelector,
    as_: str,
) -> List[Dict[str, Any]]:
    """One-to-one attachment using key selector functions (first match wins)."""
    parent_rows = as_records(parents)
    child_rows = as_records(children)
    child_by_key = index_first(child_rows, child_selector)
    logger.debug(
        "attach one %r: %d parents, %d children, %d keys",
        as_, len(parent_rows), len(child_rows), len(child_by_key),
    )

    result = []
    for parent in parent_rows:
        key = check_key(parent_selector(parent), "parent key")
        result.append(enrich(parent, as_, child_by_key.get(key)))
    return result


def attach_children(
    parents: Records,
    children: Records,
    parent_key: str,
    child_key: str,
    as_: str,
) -> List[Dict[str, Any]]:
    """
    Attaches child records to parent records (one-to-many join).

    Time complexity: O(n + m) where n = len(parents), m = len(children)

    Args:
        parents: Parent records
        children: Child records to attach
        parent_key: Field in parent holding the join key
        child_key: Field in child holding the join key
        as_: Name of the new field holding the list of matching children

    Returns:
        New list of parents, each with `as_` set to its matches ([] if none)

    Example:
        >>> users = [{"id": 1}, {"id": 2}]
        >>> orders = [{"id": 101, "userId": 1}, {"id": 102, "userId": 1},
        ...           {"id": 103, "userId": 2}]
        >>> [len(u["orders"]) for u in attach_children(users, orders, "id", "userId", "orders")]
        [2, 1]
    """
    return attach_many_by(
        parents, children, field_getter(parent_key), field_getter(child_key), as_
    )


def attach_child(
    parents: Records,
    children: Records,
    parent_key: str,
    child_key: str,
    as_: str,
) -> List[Dict[str, Any]]:
    """
    Attaches a single child record to parent records (one-to-one join).

    Only the first child per key (in child input order) is kept. Parents
    without a match get None under `as_`.

    Example:
        >>> users = [{"id": 1, "name": "Ana"}, {"id": 2, "name": "Juan"}]
        >>> addresses = [{"id": 201, "userId": 1, "city": "Madrid"}]
        >>> [u["address"] for u in attach_child(users, addresses, "id", "userId", "address")]
        [{'id': 201, 'userId': 1, 'city': 'Madrid'}, None]
    """
    return attach_one_by(
        parents, children, field_getter(parent_key), field_getter(child_key), as_
    )


def join_by_selectors(
    parents: Records,
    children: Records,
    parent_selector: KeySelector,
    child_selector: KeySelector,
    as_: str,
    mode: CardinalityLike = Cardinality.MANY,
) -> List[Dict[str, Any]]:
    """
    Joins two record sequences using selector functions for the join keys.

    Both selectors must return mutually comparable, hashable keys.

    Args:
        parents: Parent records
        children: Child records
        parent_selector: Extracts the join key from a parent
        child_selector: Extracts the join key from a child
        as_: Name of the field to add to parents
        mode: "many" attaches lists, "one" attaches the first match or None

    Raises:
        CardinalityError: if mode is not "one" or "many"

    Example:
        >>> products = [{"sku": "ABC-123"}, {"sku": "XYZ-789"}]
        >>> reviews = [{"productCode": "abc-123", "rating": 5}]
        >>> result = join_by_selectors(
        ...     products, reviews,
        ...     parent_selector=lambda p: p["sku"].lower(),
        ...     child_selector=lambda r: r["productCode"],
        ...     as_="reviews", mode="many")
        >>> [len(p["reviews"]) for p in result]
        [1, 0]
    """
    if Cardinality.parse(mode) is Cardinality.ONE:
        return attach_one_by(parents, children, parent_selector, child_selector, as_)
    return attach_many_by(parents, children, parent_selector, child_selector, as_)
