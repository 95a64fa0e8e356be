"""
Nested group index.

Builds a tree of dicts with one level per key field, terminating in lists
of records, and walks it by a path of key values.
"""

from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Sequence

from .records import Record, Records, as_records, check_key, get_field

KeyNormalizer = Callable[[Any], Any]


def _group_level(
    items: Sequence[Record],
    field: str,
    normalize: Optional[KeyNormalizer],
) -> Dict[Any, List[Record]]:
    groups: Dict[Any, List[Record]] = {}
    for item in items:
        value = get_field(item, field)
        key = normalize(value) if normalize else check_key(value, field)
        if key not in groups:
            groups[key] = []
        groups[key].append(item)
    return groups


def create_nested_groups(
    items: Records,
    fields: Sequence[str],
    normalize: Optional[KeyNormalizer] = None,
) -> Any:
    """
    Groups items by multiple fields creating a nested structure.

    With no fields the record sequence itself is returned unchanged. That
    degenerate shape is kept for compatibility; it is not a mapping.

    Args:
        items: Records to group
        fields: Field names to group by, outermost first
        normalize: Optional function applied to every key value before it
            is stored (the lookup must be given the same function)

    Returns:
        Nested dict structure whose leaves are lists of records
    """
    records = as_records(items)
    fields = tuple(fields)

    if not fields:
        return records

    first, rest = fields[0], fields[1:]
    groups = _group_level(records, first, normalize)
    if not rest:
        return groups

    return {
        key: create_nested_groups(group, rest, normalize)
        for key, group in groups.items()
    }


def get_from_nested_groups(
    nested_groups: Any,
    path: Sequence[Any],
    normalize: Optional[KeyNormalizer] = None,
) -> List[Record]:
    """
    Retrieves items from a nested group structure using a path of key values.

    Never raises: a missing key at any level, a path longer or shorter than
    the tree depth, or an unhashable path value all yield an empty list.

    Args:
        nested_groups: Structure built by create_nested_groups
        path: Key values to navigate, outermost first
        normalize: The normalizer the structure was built with, if any

    Returns:
        List of records at that path, or [] if not found
    """
    path = tuple(path)
    if not path:
        return nested_groups if isinstance(nested_groups, list) else []

    current = nested_groups
    for value in path:
        key = normalize(value) if normalize else value
        if not isinstance(current, Mapping):
            return []
        try:
            current = current[key]
        except (KeyError, TypeError):
            return []

    return current if isinstance(current, list) else []
