"""
record_joins Exception Hierarchy

Contains all exception classes raised by the grouping and join operators.
Every configuration error is raised for the whole call; absence of a match is
never an exception.
"""


class RecordJoinError(Exception):
    """
    Base exception for all record_joins operations.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class MissingFieldError(RecordJoinError, KeyError):
    """
    Raised when a field descriptor names a field the record does not have.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """

    def __init__(self, field, available=()):
        self.field = field
        self.available = tuple(available)
        super().__init__(field)

    def __str__(self) -> str:
        if self.available:
            names = ", ".join(repr(name) for name in self.available)
            return f"Field {self.field!r} not found in record (available: {names})"
        return f"Field {self.field!r} not found in record"


class InvalidKeyError(RecordJoinError, TypeError):
    """
    Raised when a key selector or field yields a value that cannot be used
    as a lookup key (an unhashable value such as a list or dict).

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class InvalidRecordsError(RecordJoinError, TypeError):
    """
    Raised when an operator is given something other than a record sequence,
    such as a single record or the mapping produced by a grouping.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class KeyArityError(RecordJoinError, ValueError):
    """
    Raised when parent and child composite key tuples differ in length.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class CardinalityError(RecordJoinError, ValueError):
    """
    Raised for a cardinality or join mode other than "one" or "many".

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


class ConfigurationError(RecordJoinError, ValueError):
    """
    Raised when a configuration value is unusable (e.g. an empty key separator).

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is-in-process Main-Process.
    ::: This is stateless.
    """
    pass


__all__ = [
    "RecordJoinError",
    "MissingFieldError",
    "InvalidKeyError",
    "InvalidRecordsError",
    "KeyArityError",
    "CardinalityError",
    "ConfigurationError",
]
