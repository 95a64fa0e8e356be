"""
Composite key serialization.

A composite key is the rendered value of each key field joined with a
separator that is unlikely to appear in real data ("||~~||" by default).
No escaping is performed: two different value tuples collide when their
rendered parts happen to contain the separator and line up to the same
string. Callers whose key values may contain the separator should either
configure a different one or use the nested join strategy.
"""

from typing import Any, Callable, Iterable, Optional, Sequence

from .config import get_key_separator
from .exceptions import ConfigurationError
from .records import Record, get_field


def render_key_part(value: Any) -> str:
    """Render one key value; None renders as the empty string."""
    if value is None:
        return ""
    return str(value)


def _resolve_separator(separator: Optional[str]) -> str:
    if separator is None:
        return get_key_separator()
    if not separator:
        raise ConfigurationError("Composite key separator must be a non-empty string")
    return separator


def create_composite_key(values: Iterable[Any], separator: Optional[str] = None) -> str:
    """
    Creates a composite key from multiple values.

    Args:
        values: Values to combine, in key order
        separator: Overrides the configured separator

    Returns:
        A string key representing the combination

    Example:
        >>> create_composite_key(["SKU-A", "origin1"])
        'SKU-A||~~||origin1'
    """
    sep = _resolve_separator(separator)
    return sep.join(render_key_part(v) for v in values)


def make_composite_key_extractor(
    fields: Sequence[str],
    separator: Optional[str] = None,
) -> Callable[[Record], str]:
    """
    Creates a function that extracts a composite key from a record.

    The field tuple and separator are resolved once, so the returned
    extractor can be applied to many records.

    Example:
        >>> extract = make_composite_key_extractor(["sku", "origin"])
        >>> extract({"sku": "SKU-A", "origin": "origin1", "name": "Widget"})
        'SKU-A||~~||origin1'
    """
    key_fields = tuple(fields)
    sep = _resolve_separator(separator)

    def extract(record: Record) -> str:
        return sep.join(render_key_part(get_field(record, f)) for f in key_fields)

    return extract


def get_composite_key(
    record: Record,
    fields: Sequence[str],
    separator: Optional[str] = None,
) -> str:
    """Creates a composite key directly from a record and field names."""
    return create_composite_key(
        (get_field(record, f) for f in fields),
        separator=separator,
    )
