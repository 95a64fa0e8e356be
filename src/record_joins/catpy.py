"""
catpy.py: small functional core for record_joins pipelines.

- Typeclasses: Functor, Applicative, Monad
- Result (Ok/Err) for step outcomes that carry the reason of a failure
- PipelineError and the pipeline_ok/pipeline_err constructors
- compose, identity
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")
V = TypeVar("V")
E = TypeVar("E")


# ---------------------------------------------------------------------------
# Core typeclasses
# ---------------------------------------------------------------------------

class Functor(ABC, Generic[T]):
    """
    A structure that supports mapping a function over the values it contains.

    Laws: fmap(id) == id, fmap(g)∘fmap(f) == fmap(g∘f)

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a type-class.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    @abstractmethod
    def fmap(self, f: Callable[[T], U]) -> "Functor[U]":
        """Map a pure function over the structure."""
        raise NotImplementedError

    def map(self, f: Callable[[T], U]) -> "Functor[U]":
        return self.fmap(f)


class Applicative(Functor[T], ABC):
    """
    A Functor that can lift pure values and apply wrapped functions.

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a type-class.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    @classmethod
    @abstractmethod
    def pure(cls, x: U) -> "Applicative[U]":
        """Lift a value into the applicative context."""
        raise NotImplementedError

    @abstractmethod
    def ap(self: "Applicative[Callable[[T], U]]", x: "Applicative[T]") -> "Applicative[U]":
        """Apply a wrapped function to a wrapped value."""
        raise NotImplementedError


class Monad(Applicative[T], ABC):
    """
    A structure that supports sequencing (bind).

    Laws:
      pure(x).bind(f) == f(x)
      m.bind(pure) == m
      m.bind(f).bind(g) == m.bind(lambda x: f(x).bind(g))

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a type-class.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    @abstractmethod
    def bind(self, f: Callable[[T], "Monad[U]"]) -> "Monad[U]":
        """Chain a function that returns a wrapped value (aka flatMap)."""
        raise NotImplementedError

    def flat_map(self, f: Callable[[T], "Monad[U]"]) -> "Monad[U]":
        return self.bind(f)

    def __rshift__(self, f: Callable[[T], "Monad[U]"]) -> "Monad[U]":
        """m >> f == m.bind(f)"""
        return self.bind(f)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

class Result(Monad[T], ABC, Generic[T, E]):
    """
    Tagged union for success or failure with an error value: Ok(value) or Err(error).

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a monad.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    @classmethod
    def pure(cls, x: U) -> "Result[U, E]":  # type: ignore[override]
        return Ok(x)

    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    def is_err(self) -> bool:
        return isinstance(self, Err)

    def unwrap(self) -> T:
        """Get the value or raise if Err."""
        if isinstance(self, Ok):
            return self.value
        raise ValueError(f"Cannot unwrap Err: {self}")

    def unwrap_or(self, default: T) -> T:
        """Get the value or return default if Err."""
        if isinstance(self, Ok):
            return self.value
        return default


@dataclass(frozen=True)
class Ok(Result[T, E]):
    """A successful result.

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a monad.
    """
    value: T

    def bind(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return f(self.value)

    def fmap(self, f: Callable[[T], U]) -> Result[U, E]:  # type: ignore[override]
        return Ok(f(self.value))

    def ap(self, x: Result[T, E]) -> Result[U, E]:  # type: ignore[override]
        if not callable(self.value):
            raise TypeError("Ok.ap expects an Ok(function).")
        if isinstance(x, Ok):
            return Ok(self.value(x.value))
        return x

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Result[Any, E]):
    """A failed result carrying error information.

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a monad.
    """
    error: E

    def bind(self, f: Callable[[Any], Result[U, E]]) -> Result[U, E]:
        return self  # type: ignore[return-value]

    def fmap(self, f: Callable[[Any], U]) -> Result[U, E]:  # type: ignore[override]
        return self  # type: ignore[return-value]

    def ap(self, x: Result[Any, E]) -> Result[Any, E]:  # type: ignore[override]
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def compose(f: Callable[[U], V], g: Callable[[T], U]) -> Callable[[T], V]:
    """compose(f, g)(x) == f(g(x))"""
    return lambda x: f(g(x))


def identity(x: T) -> T:
    return x


# ---------------------------------------------------------------------------
# Pipeline Error Type
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineError:
    """Error raised by a pipeline step, with the operator exception as cause.

    ::: This is-in-layer Functional-Core-Layer.
    ::: This is a value-object.
    """
    step: str
    message: str
    cause: Optional[Exception] = None

    def __str__(self) -> str:
        if self.cause:
            return f"[{self.step}] {self.message}: {self.cause}"
        return f"[{self.step}] {self.message}"


PipelineResult = Result[T, PipelineError]


def pipeline_ok(value: T) -> PipelineResult[T]:
    """Create a successful pipeline result."""
    return Ok(value)


def pipeline_err(step: str, message: str, cause: Optional[Exception] = None) -> PipelineResult[Any]:
    """Create a failed pipeline result."""
    return Err(PipelineError(step, message, cause))
