"""
Grouping operators.

All grouping is a single pass over the input: keys appear in first-seen
order and records keep their input order inside each group. Nothing is
sorted.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from .keys import make_composite_key_extractor
from .logging_config import configure_logger_for_debug_trace
from .nested import create_nested_groups
from .records import Record, Records, as_records, check_key, field_getter

logger = configure_logger_for_debug_trace(__name__)

K = TypeVar("K")
R = TypeVar("R")


def group_by(
    items: Records,
    key_selector: Callable[[Record], K],
) -> Dict[K, List[Record]]:
    """
    Groups records by a key selector function.

    Args:
        items: Records to group
        key_selector: Function that extracts the grouping key from each record

    Returns:
        Dict of key -> list of records sharing that key

    Raises:
        InvalidKeyError: if the selector returns an unhashable value

    Example:
        >>> users = [
        ...     {"id": 1, "name": "Ana", "role": "admin"},
        ...     {"id": 2, "name": "Juan", "role": "user"},
        ...     {"id": 3, "name": "Luis", "role": "admin"},
        ... ]
        >>> list(group_by(users, lambda u: u["role"]))
        ['admin', 'user']
    """
    records = as_records(items)
    result: Dict[K, List[Record]] = {}

    for item in records:
        key = check_key(key_selector(item))
        if key not in result:
            result[key] = []
        result[key].append(item)

    logger.debug("group_by: %d records -> %d groups", len(records), len(result))
    return result


def group_by_key(items: Records, field: str) -> Dict[Any, List[Record]]:
    """
    Groups records by the value of one named field.

    Equivalent to group_by(items, lambda r: r[field]), with a missing field
    reported as MissingFieldError.
    """
    return group_by(items, field_getter(field))


def group_by_many(items: Records, fields: Sequence[str]) -> Any:
    """
    Groups records by multiple fields, creating nested groups.

    Example:
        >>> sales = [
        ...     {"country": "USA", "city": "NYC", "amount": 100},
        ...     {"country": "USA", "city": "LA", "amount": 200},
        ...     {"country": "Spain", "city": "Madrid", "amount": 150},
        ... ]
        >>> grouped = group_by_many(sales, ["country", "city"])
        >>> sorted(grouped["USA"])
        ['LA', 'NYC']

    With an empty field list the input sequence is returned as-is; with one
    field the result is the same as group_by_key.
    """
    fields = tuple(fields)
    if len(fields) == 1:
        return group_by_key(items, fields[0])
    return create_nested_groups(items, fields)


def group_by_transform(
    items: Records,
    key_selector: Callable[[Record], K],
    value_transform: Callable[[List[Record]], R],
) -> Dict[K, R]:
    """
    Groups records, then transforms each group.

    value_transform is called exactly once per distinct key, with exactly
    the records for that key in input order.

    Example:
        >>> orders = [
        ...     {"userId": 1, "total": 100},
        ...     {"userId": 1, "total": 50},
        ...     {"userId": 2, "total": 200},
        ... ]
        >>> group_by_transform(orders, lambda o: o["userId"],
        ...                    lambda g: sum(o["total"] for o in g))
        {1: 150, 2: 200}
    """
    grouped = group_by(items, key_selector)
    return {key: value_transform(group) for key, group in grouped.items()}


def group_by_composite(
    items: Records,
    fields: Sequence[str],
    separator: Optional[str] = None,
) -> Dict[str, List[Record]]:
    """
    Groups records by several fields forming one serialized composite key.

    Unlike group_by_many the result is flat:

        {"USA||~~||NYC": [...], "USA||~~||LA": [...]}
    """
    key_extractor = make_composite_key_extractor(fields, separator=separator)
    return group_by(items, key_extractor)
