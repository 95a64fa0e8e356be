"""
Join operators.

- flat: single-key and selector-based joins
- composite: composite-key joins through serialized keys
- nested: composite-key joins through a nested group index
- filtered: three-level join with a shared middle catalog
"""

from .composite import attach_child_composite, attach_children_composite
from .filtered import attach_children_with_filter
from .flat import attach_child, attach_children, join_by_selectors
from .nested import attach_child_nested, attach_children_nested

__all__ = [
    "attach_children",
    "attach_child",
    "join_by_selectors",
    "attach_children_composite",
    "attach_child_composite",
    "attach_children_nested",
    "attach_child_nested",
    "attach_children_with_filter",
]
