"""
Relationship cardinality: "many" attaches a list, "one" attaches the first
match or None.
"""

from enum import Enum
from typing import Any, List, Optional, Sequence, Union

from .exceptions import CardinalityError


class Cardinality(str, Enum):
    """Cardinality of an attached relation.

    ::: This is-in-layer Domain-Layer.
    ::: This is a value-object.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    MANY = "many"
    ONE = "one"

    @classmethod
    def parse(cls, value: Union["Cardinality", str]) -> "Cardinality":
        """Accept a Cardinality or its string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise CardinalityError(
                f"Unknown cardinality {value!r}; expected 'one' or 'many'"
            ) from None


CardinalityLike = Union[Cardinality, str]


def first_or_none(items: Sequence[Any]) -> Optional[Any]:
    """First element, or None for an empty sequence."""
    return items[0] if items else None


def resolve_cardinality(items: List[Any], cardinality: CardinalityLike) -> Any:
    """Apply cardinality to a list of matches."""
    if Cardinality.parse(cardinality) is Cardinality.ONE:
        return first_or_none(items)
    return items
