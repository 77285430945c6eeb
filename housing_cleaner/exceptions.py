"""Exception types raised by the housing cleaner.

Only :class:`SchemaError`, :class:`SchemaOrderingViolation` and
:class:`StoreUnavailableError` ever reach the caller of the pipeline.
:class:`MalformedInputError` is raised by the pure parsing helpers and turned
into an anomaly entry by the phase that called them.
"""


class CleaningError(Exception):
    """Base class for all housing cleaner errors."""


class MalformedInputError(CleaningError, ValueError):
    """A single value could not be parsed (address without delimiter, bad date)."""

    def __init__(self, message: str, value=None) -> None:
        super().__init__(message)
        self.value = value


class SchemaError(CleaningError):
    """A column required by the pipeline is missing or unknown."""


class SchemaOrderingViolation(SchemaError):
    """A step reads or writes a column that is not available at that point."""


class StoreUnavailableError(CleaningError):
    """The record store could not be read or written."""
