"""
Composite-key joins, nested strategy.

Children are indexed in a nested group structure, one level per key field,
and each parent walks it with the values of its own key fields. Key parts
are rendered the same way the serialized strategy renders them, so both
strategies match exactly the same parent/child pairs.
"""

from typing import Any, Dict, List, Sequence

from ..cardinality import first_or_none
from ..keys import render_key_part
from ..logging_config import configure_logger_for_debug_trace
from ..nested import create_nested_groups, get_from_nested_groups
from ..records import Records, as_records, enrich, get_field
from .composite import check_key_arity

logger = configure_logger_for_debug_trace(__name__)


def _nested_matches(
    parents: Records,
    children: Records,
    parent_keys: Sequence[str],
    child_keys: Sequence[str],
):
    parent_keys, child_keys = check_key_arity(parent_keys, child_keys)
    parent_rows = as_records(parents)
    nested_groups = create_nested_groups(children, child_keys, normalize=render_key_part)
    logger.debug(
        "nested join on %r = %r: %d parents",
        parent_keys, child_keys, len(parent_rows),
    )

    for parent in parent_rows:
        path = [get_field(parent, key) for key in parent_keys]
        yield parent, get_from_nested_groups(nested_groups, path, normalize=render_key_part)


def attach_children_nested(
    parents: Records,
    children: Records,
    parent_keys: Sequence[str],
    child_keys: Sequence[str],
    as_: str,
) -> List[Dict[str, Any]]:
    """
    Attaches child records to parents using nested composite keys (one-to-many join).

    Time complexity: O(n * k + m * k) where k = number of key fields

    Example:
        >>> stock = [{"sku": "A", "origin": "US", "qty": 5},
        ...          {"sku": "A", "origin": "EU", "qty": 9}]
        >>> result = attach_children_nested(
        ...     [{"sku": "A", "origin": "US"}], stock,
        ...     ["sku", "origin"], ["sku", "origin"], "stock")
        >>> [s["qty"] for s in result[0]["stock"]]
        [5]
    """
    return [
        enrich(parent, as_, list(matches))
        for parent, matches in _nested_matches(parents, children, parent_keys, child_keys)
    ]


def attach_child_nested(
    parents: Records,
    children: Records,
    parent_keys: Sequence[str],
    child_keys: Sequence[str],
    as_: str,
) -> List[Dict[str, Any]]:
    """
    Attaches a single child record using nested composite keys (one-to-one join).

    The first child in input order wins; unmatched parents get None.
    """
    return [
        enrich(parent, as_, first_or_none(matches))
        for parent, matches in _nested_matches(parents, children, parent_keys, child_keys)
    ]
