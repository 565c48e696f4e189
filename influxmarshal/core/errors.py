"""Errors raised while marshaling a record into a point."""

from typing import Optional


class MarshalError(Exception):
    """Base class for all marshaling errors."""


class NilInputError(MarshalError, ValueError):
    """The record passed to marshal() was None."""

    def __init__(self, message: str = "value is nil"):
        super().__init__(message)


class NotAStructError(MarshalError, TypeError):
    """The record passed to marshal() is not a dataclass instance."""

    def __init__(self, value_type: type):
        self.value_type = value_type
        super().__init__(f"not a struct: {value_type.__name__}")


class UnsupportedTypeError(MarshalError, TypeError):
    """A member resolved to a value that cannot be stored as a tag or field."""

    def __init__(self, member: str, value_type: type):
        self.member = member
        self.value_type = value_type
        super().__init__(f"Unsupported type for member {member} ({value_type.__name__})")


class ZeroValueFault(MarshalError, AssertionError):
    """
    Zero-value detection was asked about a kind it has no notion of.

    This indicates a bug in the calling logic rather than bad input.
    """

    def __init__(self, value_type: type, member: Optional[str] = None):
        self.value_type = value_type
        self.member = member
        where = f" for member {member}" if member else ""
        super().__init__(f"isZero: unexpected kind {value_type.__name__}{where}")
