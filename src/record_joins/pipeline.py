"""
Composable pipelines over the grouping and join operators.

A Step is a Kleisli arrow: data -> Result[data', PipelineError]. Steps
compose with >>, and a Pipeline is a source value plus an ordered list of
steps. Every step materializes its full output before the next one runs;
the first failing step short-circuits the rest.

    result = (
        Pipeline.from_value(users)
        .attach_children(orders, parent_key="id", child_key="userId", as_="orders")
        .attach_child(addresses, parent_key="id", child_key="userId", as_="address")
        .filter(lambda u: u["orders"])
        .run()
    )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, Sequence, TypeVar

from .cardinality import Cardinality, CardinalityLike
from .catpy import PipelineResult, pipeline_err, pipeline_ok
from .exceptions import RecordJoinError
from .grouping import group_by, group_by_composite, group_by_many, group_by_transform
from .joins.composite import attach_child_composite, attach_children_composite
from .joins.filtered import attach_children_with_filter
from .joins.flat import attach_child, attach_children, join_by_selectors
from .joins.nested import attach_child_nested, attach_children_nested
from .logging_config import configure_logger_for_debug_trace
from .records import Record, Records, as_records, field_getter

logger = configure_logger_for_debug_trace(__name__)

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")

STRATEGIES = ("serialized", "nested")


def _failed(step: str, error: Exception) -> PipelineResult[Any]:
    logger.debug("step %s failed: %s", step, error)
    if isinstance(error, RecordJoinError):
        return pipeline_err(step, type(error).__name__, error)
    return pipeline_err(step, f"{step} failed", error)


# =============================================================================
# Step - Kleisli Arrow for Pipeline
# =============================================================================

class Step(ABC, Generic[T, U]):
    """
    A step in a pipeline: T -> Result[U, PipelineError]

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a step.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    name = "step"

    @abstractmethod
    def execute(self, data: T) -> PipelineResult[U]:
        """Transform input data and return result."""

    def __rshift__(self, other: "Step[U, V]") -> "ComposedStep[T, U, V]":
        """Compose steps: step1 >> step2"""
        return ComposedStep(self, other)

    def and_then(self, other: "Step[U, V]") -> "ComposedStep[T, U, V]":
        return self >> other


@dataclass
class ComposedStep(Step[T, V], Generic[T, U, V]):
    """Composition of two steps (Kleisli composition).

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a step.
    """
    first: Step[T, U]
    second: Step[U, V]

    name = "composed"

    def execute(self, data: T) -> PipelineResult[V]:
        return self.first.execute(data).bind(self.second.execute)


class RecordStep(Step[Records, Any]):
    """Step that runs one operator over a record sequence, capturing its errors.

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a step.
    """

    def execute(self, data: Records) -> PipelineResult[Any]:
        try:
            return pipeline_ok(self.apply(as_records(data)))
        except Exception as e:
            return _failed(self.name, e)

    @abstractmethod
    def apply(self, records: List[Record]) -> Any:
        """Run the operator."""


@dataclass
class FilterStep(RecordStep):
    """Keep records matching a predicate."""
    predicate: Callable[[Record], bool]

    name = "filter"

    def apply(self, records: List[Record]) -> List[Record]:
        return [item for item in records if self.predicate(item)]


@dataclass
class MapStep(RecordStep):
    """Transform each record."""
    transform: Callable[[Record], Any]

    name = "map"

    def apply(self, records: List[Record]) -> List[Any]:
        return [self.transform(item) for item in records]


@dataclass
class GroupByStep(RecordStep):
    """Group records by field value or key function, with optional per-group transform.

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a step.
    """
    field_name: Optional[str] = None
    key_fn: Optional[Callable[[Record], Any]] = None
    aggregate_fn: Optional[Callable[[List[Record]], Any]] = None

    name = "group_by"

    def apply(self, records: List[Record]) -> Dict[Any, Any]:
        if self.key_fn is None and self.field_name is None:
            raise ValueError("group_by needs a field name or a key function")
        key_fn = self.key_fn if self.key_fn is not None else field_getter(self.field_name)
        if self.aggregate_fn is not None:
            return group_by_transform(records, key_fn, self.aggregate_fn)
        return group_by(records, key_fn)


@dataclass
class GroupByManyStep(RecordStep):
    """Nested grouping by several fields."""
    fields: Sequence[str]

    name = "group_by_many"

    def apply(self, records: List[Record]) -> Any:
        return group_by_many(records, self.fields)


@dataclass
class GroupByCompositeStep(RecordStep):
    """Flat grouping by a serialized composite key."""
    fields: Sequence[str]
    separator: Optional[str] = None

    name = "group_by_composite"

    def apply(self, records: List[Record]) -> Dict[str, List[Record]]:
        return group_by_composite(records, self.fields, separator=self.separator)


@dataclass
class AttachStep(RecordStep):
    """Single-key join of the pipeline records (parents) with a child sequence.

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a step.
    """
    children: Records
    parent_key: str
    child_key: str
    as_: str
    cardinality: CardinalityLike = Cardinality.MANY

    @property
    def name(self) -> str:
        return "attach_child" if self.cardinality == Cardinality.ONE else "attach_children"

    def apply(self, records: List[Record]) -> List[Dict[str, Any]]:
        if Cardinality.parse(self.cardinality) is Cardinality.ONE:
            return attach_child(records, self.children, self.parent_key, self.child_key, self.as_)
        return attach_children(records, self.children, self.parent_key, self.child_key, self.as_)


@dataclass
class SelectorJoinStep(RecordStep):
    """Join using computed keys."""
    children: Records
    parent_selector: Callable[[Record], Any]
    child_selector: Callable[[Record], Any]
    as_: str
    mode: CardinalityLike = Cardinality.MANY

    name = "join_by_selectors"

    def apply(self, records: List[Record]) -> List[Dict[str, Any]]:
        return join_by_selectors(
            records, self.children, self.parent_selector, self.child_selector,
            self.as_, self.mode,
        )


@dataclass
class CompositeJoinStep(RecordStep):
    """Composite-key join with a selectable index strategy ("serialized" or "nested")."""
    children: Records
    parent_keys: Sequence[str]
    child_keys: Sequence[str]
    as_: str
    cardinality: CardinalityLike = Cardinality.MANY
    strategy: str = "serialized"

    name = "attach_composite"

    def apply(self, records: List[Record]) -> List[Dict[str, Any]]:
        one = Cardinality.parse(self.cardinality) is Cardinality.ONE
        if self.strategy == "serialized":
            join = attach_child_composite if one else attach_children_composite
        elif self.strategy == "nested":
            join = attach_child_nested if one else attach_children_nested
        else:
            raise ValueError(
                f"Unknown composite join strategy {self.strategy!r}; expected one of {STRATEGIES}"
            )
        return join(records, self.children, self.parent_keys, self.child_keys, self.as_)


@dataclass
class FilteredJoinStep(RecordStep):
    """Three-level join with a shared middle catalog."""
    middle: Records
    children: Records
    parent_key: str
    child_parent_key: str
    middle_key: str
    child_key: str
    middle_as: str
    child_as: str
    middle_cardinality: CardinalityLike = Cardinality.MANY
    child_cardinality: CardinalityLike = Cardinality.MANY

    name = "attach_with_filter"

    def apply(self, records: List[Record]) -> List[Dict[str, Any]]:
        return attach_children_with_filter(
            records, self.middle, self.children,
            parent_key=self.parent_key,
            child_parent_key=self.child_parent_key,
            middle_key=self.middle_key,
            child_key=self.child_key,
            middle_as=self.middle_as,
            child_as=self.child_as,
            middle_cardinality=self.middle_cardinality,
            child_cardinality=self.child_cardinality,
        )


# =============================================================================
# Pipeline
# =============================================================================

@dataclass
class Pipeline:
    """
    A composable chain of steps over a materialized record sequence.

    Pipelines are immutable: every fluent method returns a new pipeline.
    Nothing runs until run() or execute() is called.

    ::: This is-in-layer Pipeline-Layer.
    ::: This is a pipeline.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    _source: Records
    _steps: List[Step] = field(default_factory=list)
    _emit_key: Optional[str] = None

    @classmethod
    def from_value(cls, records: Records) -> "Pipeline":
        """Create pipeline from a record sequence (list, iterable or pyarrow.Table)."""
        return cls(_source=records)

    def _add_step(self, step: Step) -> "Pipeline":
        return Pipeline(
            _source=self._source,
            _steps=self._steps + [step],
            _emit_key=self._emit_key,
        )

    # -------------------------------------------------------------------------
    # Transformation Methods
    # -------------------------------------------------------------------------

    def filter(self, predicate: Callable[[Record], bool]) -> "Pipeline":
        return self._add_step(FilterStep(predicate))

    def map(self, transform: Callable[[Record], Any]) -> "Pipeline":
        return self._add_step(MapStep(transform))

    def group_by(self, field: Optional[str] = None, *,
                 key: Optional[Callable[[Record], Any]] = None,
                 aggregate: Optional[Callable[[List[Record]], Any]] = None) -> "Pipeline":
        """Group by field or key function, with optional per-group transform."""
        return self._add_step(GroupByStep(field_name=field, key_fn=key, aggregate_fn=aggregate))

    def group_by_many(self, *fields: str) -> "Pipeline":
        return self._add_step(GroupByManyStep(fields))

    def group_by_composite(self, *fields: str, separator: Optional[str] = None) -> "Pipeline":
        return self._add_step(GroupByCompositeStep(fields, separator))

    def attach_children(self, children: Records, *, parent_key: str,
                        child_key: str, as_: str) -> "Pipeline":
        return self._add_step(AttachStep(children, parent_key, child_key, as_, Cardinality.MANY))

    def attach_child(self, children: Records, *, parent_key: str,
                     child_key: str, as_: str) -> "Pipeline":
        return self._add_step(AttachStep(children, parent_key, child_key, as_, Cardinality.ONE))

    def join_by_selectors(self, children: Records, *,
                          parent_selector: Callable[[Record], Any],
                          child_selector: Callable[[Record], Any],
                          as_: str, mode: CardinalityLike = Cardinality.MANY) -> "Pipeline":
        return self._add_step(SelectorJoinStep(children, parent_selector, child_selector, as_, mode))

    def attach_composite(self, children: Records, *, parent_keys: Sequence[str],
                         child_keys: Sequence[str], as_: str,
                         cardinality: CardinalityLike = Cardinality.MANY,
                         strategy: str = "serialized") -> "Pipeline":
        return self._add_step(CompositeJoinStep(
            children, tuple(parent_keys), tuple(child_keys), as_, cardinality, strategy,
        ))

    def attach_with_filter(self, middle: Records, children: Records, *,
                           parent_key: str, child_parent_key: str,
                           middle_key: str, child_key: str,
                           middle_as: str, child_as: str,
                           middle_cardinality: CardinalityLike = Cardinality.MANY,
                           child_cardinality: CardinalityLike = Cardinality.MANY) -> "Pipeline":
        return self._add_step(FilteredJoinStep(
            middle, children, parent_key, child_parent_key, middle_key, child_key,
            middle_as, child_as, middle_cardinality, child_cardinality,
        ))

    def emit(self, key: str) -> "Pipeline":
        """Set the output key for execute()."""
        return Pipeline(_source=self._source, _steps=self._steps, _emit_key=key)

    def __rshift__(self, step: Step) -> "Pipeline":
        """pipeline >> step"""
        return self._add_step(step)

    def __or__(self, step: Step) -> "Pipeline":
        """pipeline | step"""
        return self >> step

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def run(self) -> PipelineResult[Any]:
        """Execute the pipeline; errors short-circuit as Err(PipelineError)."""
        try:
            current: Any = as_records(self._source)
        except Exception as e:
            return _failed("source", e)

        for step in self._steps:
            result = step.execute(current)
            if result.is_err():
                return result
            current = result.unwrap()

        return pipeline_ok(current)

    def execute(self) -> Dict[str, Any]:
        """Execute and return an output dict: success flag plus data or error."""
        result = self.run()

        if result.is_err():
            return {"success": False, "error": str(result.error)}

        data = result.unwrap()
        output: Dict[str, Any] = {"success": True}

        if self._emit_key:
            output[self._emit_key] = data
            if isinstance(data, list):
                output["count"] = len(data)
        elif isinstance(data, dict):
            output["groups"] = data
            output["count"] = len(data)
        elif isinstance(data, list):
            output["results"] = data
            output["count"] = len(data)
        else:
            output["result"] = data

        return output
