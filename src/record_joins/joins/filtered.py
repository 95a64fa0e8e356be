"""
Three-level join: parents -> shared catalog (middle) -> children filtered
by both the middle record and the owning parent.
"""

from typing import Any, Dict, List, Tuple

from ..cardinality import Cardinality, CardinalityLike, resolve_cardinality
from ..logging_config import configure_logger_for_debug_trace
from ..records import Record, Records, as_records, check_key, enrich, get_field

logger = configure_logger_for_debug_trace(__name__)


def attach_children_with_filter(
    parents: Records,
    middle: Records,
    children: Records,
    parent_key: str,
    child_parent_key: str,
    middle_key: str,
    child_key: str,
    middle_as: str,
    child_as: str,
    middle_cardinality: CardinalityLike = Cardinality.MANY,
    child_cardinality: CardinalityLike = Cardinality.MANY,
) -> List[Dict[str, Any]]:
    """
    Attaches children to middle records, then those enriched middle records
    to parents.

    The middle sequence acts as a catalog shared by every parent: each
    parent sees every middle record, but inside each one only the children
    whose `child_parent_key` equals that parent's `parent_key`.

    Typical shapes:
    - Enrollments -> PeriodFees (catalog) -> Payments (filtered by enrollment)
    - Users -> Products (catalog) -> Purchases (filtered by user)
    - Orders -> AvailableItems (catalog) -> OrderItems (filtered by order)

    Time complexity: O(p * m + c) where p = parents, m = middle, c = children
    Space complexity: O(c) for the children index

    Args:
        parents: Top-level records
        middle: Catalog records shared across all parents
        children: Records filtered per parent and attached to middle records
        parent_key: Field in parent matched against child_parent_key
        child_parent_key: Field in child linking it to its parent
        middle_key: Field in middle matched against child_key
        child_key: Field in child linking it to a middle record
        middle_as: Field added to parents
        child_as: Field added to middle records
        middle_cardinality: "many" (list of middle records) or "one"
            (first middle record or None when the catalog is empty)
        child_cardinality: "many" (list of children) or "one"
            (first matching child or None)

    Returns:
        New list of parents with enriched middle records attached

    Raises:
        CardinalityError: if either cardinality is not "one" or "many"

    Example:
        >>> result = attach_children_with_filter(
        ...     parents=[{"id": 1}],
        ...     middle=[{"id": 10}, {"id": 20}],
        ...     children=[{"id": 1, "enrollmentId": 1, "feeId": 10, "paid": 100}],
        ...     parent_key="id", child_parent_key="enrollmentId",
        ...     middle_key="id", child_key="feeId",
        ...     middle_as="fees", child_as="payment",
        ...     child_cardinality="one")
        >>> [fee["payment"] is None for fee in result[0]["fees"]]
        [False, True]
    """
    middle_cardinality = Cardinality.parse(middle_cardinality)
    child_cardinality = Cardinality.parse(child_cardinality)

    parent_rows = as_records(parents)
    catalog = as_records(middle)
    child_rows = as_records(children)

    # Step 1: index (owner, child) pairs by the field linking children to middle records - O(c)
    children_by_middle_key: Dict[Any, List[Tuple[Any, Record]]] = {}
    for child in child_rows:
        key = check_key(get_field(child, child_key), "child key")
        owner = get_field(child, child_parent_key)
        existing = children_by_middle_key.get(key)
        if existing is None:
            children_by_middle_key[key] = [(owner, child)]
        else:
            existing.append((owner, child))
    middle_key_values = [check_key(get_field(mid, middle_key), "middle key") for mid in catalog]

    logger.debug(
        "filtered join %r/%r: %d parents, %d middle, %d children (%s/%s)",
        middle_as, child_as, len(parent_rows), len(catalog), len(child_rows),
        middle_cardinality.value, child_cardinality.value,
    )

    # Step 2: per parent, enrich every catalog entry with that parent's children - O(p * m)
    result = []
    for parent in parent_rows:
        parent_key_value = get_field(parent, parent_key)

        middle_with_children = []
        for mid, mid_key_value in zip(catalog, middle_key_values):
            candidates = children_by_middle_key.get(mid_key_value, [])
            matching = [child for owner, child in candidates if owner == parent_key_value]
            middle_with_children.append(
                enrich(mid, child_as, resolve_cardinality(matching, child_cardinality))
            )

        result.append(
            enrich(parent, middle_as, resolve_cardinality(middle_with_children, middle_cardinality))
        )

    return result

