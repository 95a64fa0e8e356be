"""
Record access and enrichment.

Records are mappings with named fields. Every operator reads fields through
get_field/field_getter so that a missing field or an unusable key value is
reported the same way everywhere, and builds its output through enrich so
that input records are never mutated.

PyArrow tables are accepted wherever a record sequence is expected and are
converted to a list of dicts at the boundary.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping
from typing import Any, Callable, Dict, List, Union

import pyarrow as pa

from .exceptions import InvalidKeyError, InvalidRecordsError, MissingFieldError

Record = Mapping[str, Any]
Records = Union[pa.Table, Iterable[Record]]


# =============================================================================
# Arrow Utilities
# =============================================================================

def table_to_dict_list(table: pa.Table) -> List[Dict[str, Any]]:
    """Convert a PyArrow table to a list of dicts.

    Every column from the schema is present in every row, with None for
    nulls, so field lookups on converted rows never miss a schema column.
    """
    if table is None or table.num_rows == 0:
        return []

    rows = table.to_pylist()
    column_names = table.column_names
    for row in rows:
        for col_name in column_names:
            if col_name not in row:
                row[col_name] = None
    return rows


def to_arrow(data: Records) -> pa.Table:
    """Convert records to a PyArrow table."""
    if isinstance(data, pa.Table):
        return data
    rows = as_records(data)
    if not rows:
        return pa.table({})
    return pa.Table.from_pylist([dict(row) for row in rows])


def to_list(data: Records) -> List[Record]:
    """Convert data to a list of records."""
    return as_records(data)


def is_arrow(data) -> bool:
    """Check if data is a PyArrow table."""
    return isinstance(data, pa.Table)


# =============================================================================
# Record access
# =============================================================================

def as_records(data: Records) -> List[Record]:
    """
    Materialize a record sequence.

    A list is returned as-is (same object, never copied or mutated), a PyArrow
    table is converted row by row, and any other iterable is collected into a
    new list.

    Raises:
        InvalidRecordsError: if data is a mapping (a single record or a
            grouping result), a string, or not iterable
    """
    if isinstance(data, list):
        return data
    if is_arrow(data):
        return table_to_dict_list(data)
    if data is None:
        return []
    if isinstance(data, Mapping):
        raise InvalidRecordsError(
            f"Expected a sequence of records, got a mapping with keys "
            f"{list(data)[:5]!r}; pass a list of records instead"
        )
    if isinstance(data, (str, bytes)) or not isinstance(data, Iterable):
        raise InvalidRecordsError(
            f"Expected a sequence of records, got {type(data).__name__}"
        )
    return list(data)


def get_field(record: Record, field: str) -> Any:
    """
    Read a named field from a record.

    Raises:
        MissingFieldError: if the record has no such field
    """
    try:
        return record[field]
    except KeyError:
        available = record.keys() if isinstance(record, Mapping) else ()
        raise MissingFieldError(field, available) from None
    except TypeError:
        raise MissingFieldError(field) from None


def field_getter(field: str) -> Callable[[Record], Any]:
    """Key selector that reads one named field; agrees with get_field."""
    def getter(record: Record) -> Any:
        return get_field(record, field)
    getter.__name__ = f"field_getter({field!r})"
    return getter


def check_key(value: Any, role: str = "key") -> Any:
    """
    Ensure a value can be used as a lookup key.

    None is an ordinary key value; unhashable values are rejected.

    Raises:
        InvalidKeyError: if the value is unhashable
    """
    if not isinstance(value, Hashable):
        raise InvalidKeyError(
            f"{role} value {value!r} of type {type(value).__name__} "
            f"cannot be used as a lookup key"
        )
    try:
        hash(value)
    except TypeError as e:
        # Tuples of unhashable items pass the Hashable check
        raise InvalidKeyError(
            f"{role} value {value!r} cannot be used as a lookup key"
        ) from e
    return value


def enrich(record: Record, name: str, value: Any) -> Dict[str, Any]:
    """New record with every original field plus `name` set to `value`."""
    enriched = dict(record)
    enriched[name] = value
    return enriched
