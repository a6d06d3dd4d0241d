"""
Exception hierarchy for the SSZ type system.

Every decoding failure raised by the types in this package is an `SSZError`.
The persistence layer relies on that: a tampered or truncated record must
surface as one exception family, never as an arbitrary built-in error.
"""

from __future__ import annotations


class SSZError(Exception):
    """
    Base exception for all SSZ-related errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class SSZTypeError(SSZError, TypeError):
    """Raised when an SSZ type is misdefined or a value has the wrong type."""


class SSZValueError(SSZError, ValueError):
    """Raised when a value is invalid for an SSZ type even though its type is right."""


class SSZOverflowError(SSZValueError):
    """
    Raised when a numeric value is outside the valid range.

    Attributes:
        value: The value that caused the overflow.
        type_name: The SSZ type that couldn't hold the value.
        max_value: The maximum allowed value (inclusive).
    """

    def __init__(self, value: int, type_name: str, *, max_value: int) -> None:
        self.value = value
        self.type_name = type_name
        self.max_value = max_value
        super().__init__(f"{value} is out of range for {type_name} (valid range: [0, {max_value}])")


class SSZLengthError(SSZValueError):
    """
    Raised when a sequence has incorrect length.

    Attributes:
        type_name: The SSZ type with the length constraint.
        expected: The expected length (exact for vectors, max for lists).
        actual: The actual length received.
        is_limit: True if expected is a maximum limit, False if exact.
    """

    def __init__(self, type_name: str, *, expected: int, actual: int, is_limit: bool = False) -> None:
        self.type_name = type_name
        self.expected = expected
        self.actual = actual
        self.is_limit = is_limit

        if is_limit:
            msg = f"{type_name} cannot exceed {expected} elements, got {actual}"
        else:
            msg = f"{type_name} requires exactly {expected} elements, got {actual}"
        super().__init__(msg)


class SSZDecodeError(SSZValueError):
    """
    Raised when decoding SSZ bytes to a value fails.

    Attributes:
        type_name: The type being decoded.
        detail: Description of what went wrong.
    """

    def __init__(self, type_name: str, detail: str) -> None:
        self.type_name = type_name
        self.detail = detail
        super().__init__(f"Failed to decode {type_name}: {detail}")


class SSZOffsetError(SSZDecodeError):
    """Raised when the offset table of a variable-size value is malformed."""

    def __init__(self, type_name: str, *, start: int, end: int) -> None:
        self.start = start
        self.end = end
        super().__init__(type_name, f"invalid offsets (start={start}, end={end})")


class SSZSelectorError(SSZDecodeError):
    """Raised when a Union selector does not name one of its options."""

    def __init__(self, type_name: str, selector: int, num_options: int) -> None:
        self.selector = selector
        self.num_options = num_options
        super().__init__(type_name, f"selector {selector} out of range for {num_options} options")
