"""
record_joins - in-memory grouping and joins over record sequences

Combines the results of independent data fetches (separate queries, API
calls) without a relational engine: group records by one or more keys and
attach related records to parents as lists or single values.
"""

__version__ = "0.1.0"

# Grouping
from .grouping import (
    group_by,
    group_by_key,
    group_by_many,
    group_by_transform,
    group_by_composite,
)

# Joins
from .joins import (
    attach_children,
    attach_child,
    join_by_selectors,
    attach_children_composite,
    attach_child_composite,
    attach_children_nested,
    attach_child_nested,
    attach_children_with_filter,
)
from .cardinality import Cardinality

# Utilities
from .keys import (
    create_composite_key,
    make_composite_key_extractor,
    get_composite_key,
    render_key_part,
)
from .nested import create_nested_groups, get_from_nested_groups
from .records import as_records, enrich, field_getter, get_field, to_arrow

# Pipelines
from .catpy import Result, Ok, Err, PipelineError
from .pipeline import Pipeline, Step

from .config import load_config
from .exceptions import (
    RecordJoinError,
    MissingFieldError,
    InvalidKeyError,
    InvalidRecordsError,
    KeyArityError,
    CardinalityError,
    ConfigurationError,
)

__all__ = [
    "group_by",
    "group_by_key",
    "group_by_many",
    "group_by_transform",
    "group_by_composite",
    "attach_children",
    "attach_child",
    "join_by_selectors",
    "attach_children_composite",
    "attach_child_composite",
    "attach_children_nested",
    "attach_child_nested",
    "attach_children_with_filter",
    "Cardinality",
    "create_composite_key",
    "make_composite_key_extractor",
    "get_composite_key",
    "render_key_part",
    "create_nested_groups",
    "get_from_nested_groups",
    "as_records",
    "enrich",
    "field_getter",
    "get_field",
    "to_arrow",
    "Result",
    "Ok",
    "Err",
    "PipelineError",
    "Pipeline",
    "Step",
    "load_config",
    "RecordJoinError",
    "MissingFieldError",
    "InvalidKeyError",
    "InvalidRecordsError",
    "KeyArityError",
    "CardinalityError",
    "ConfigurationError",
]
