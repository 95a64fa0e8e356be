"""
Composite-key joins, serialized strategy.

Parent and child composite keys are serialized with the KeyCodec into
single strings and matched through a flat index. Parent and child field
tuples may use different names but must have the same length.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..exceptions import KeyArityError
from ..keys import make_composite_key_extractor
from ..logging_config import configure_logger_for_debug_trace
from ..records import Records
from .flat import attach_many_by, attach_one_by

logger = configure_logger_for_debug_trace(__name__)


def check_key_arity(parent_keys: Sequence[str], child_keys: Sequence[str]) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Normalize both key tuples and require equal length."""
    parent_keys = tuple(parent_keys)
    child_keys = tuple(child_keys)
    if len(parent_keys) != len(child_keys):
        raise KeyArityError(
            f"Composite key arity mismatch: parent keys {parent_keys!r} "
            f"({len(parent_keys)}) vs child keys {child_keys!r} ({len(child_keys)})"
        )
    return parent_keys, child_keys


def attach_children_composite(
    parents: Records,
    children: Records,
    parent_keys: Sequence[str],
    child_keys: Sequence[str],
    as_: str,
    separator: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Attaches child records to parents using a composite key (one-to-many join).

    Time complexity: O(n + m) where n = len(parents), m = len(children)

    Example:
        >>> products = [{"sku": "SKU-A", "origin": "origin1"}]
        >>> prices = [{"sku": "SKU-A", "origin": "origin1", "amount": 99.99},
        ...           {"sku": "SKU-A", "origin": "origin2", "amount": 89.99}]
        >>> result = attach_children_composite(
        ...     products, prices, ["sku", "origin"], ["sku", "origin"], "prices")
        >>> [p["amount"] for p in result[0]["prices"]]
        [99.99]
    """
    parent_keys, child_keys = check_key_arity(parent_keys, child_keys)
    logger.debug("composite join (many) on %r = %r", parent_keys, child_keys)
    return attach_many_by(
        parents,
        children,
        make_composite_key_extractor(parent_keys, separator=separator),
        make_composite_key_extractor(child_keys, separator=separator),
        as_,
    )


def attach_child_composite(
    parents: Records,
    children: Records,
    parent_keys: Sequence[str],
    child_keys: Sequence[str],
    as_: str,
    separator: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Attaches a single child record using a composite key (one-to-one join).

    The first child per serialized key wins; unmatched parents get None.
    """
    parent_keys, child_keys = check_key_arity(parent_keys, child_keys)
    logger.debug("composite join (one) on %r = %r", parent_keys, child_keys)
    return attach_one_by(
        parents,
        children,
        make_composite_key_extractor(parent_keys, separator=separator),
        make_composite_key_extractor(child_keys, separator=separator),
        as_,
    )
