"""
SSZ Union type.

The light client only needs unions of the form `Union[None, T]` to encode
optional store fields (the next sync committee and the best pending update),
but the class supports any option tuple with None allowed only at index 0.
"""

from __future__ import annotations

from typing import IO, Any, ClassVar, Final, Tuple, Type, cast

from pydantic import Field, field_validator
from typing_extensions import Self

from .exceptions import SSZDecodeError, SSZSelectorError, SSZTypeError, SSZValueError
from .ssz_base import SSZModel, SSZType, read_exact

MAX_UNION_OPTIONS: Final[int] = 128
"""Maximum number of options allowed in a Union (uint8 selector range)."""

SELECTOR_BYTE_SIZE: Final[int] = 1
"""Size in bytes of the selector field in SSZ encoding."""


class SSZUnion(SSZModel):
    """
    Base class for SSZ Union types.

    Subclasses define `OPTIONS`:

    ```python
    class OptionalSyncCommittee(SSZUnion):
        OPTIONS = (None, SyncCommittee)

    absent = OptionalSyncCommittee()
    present = OptionalSyncCommittee.some(committee)
    ```
    """

    OPTIONS: ClassVar[Tuple[Type[SSZType] | None, ...]]
    """Possible types, indexed by selector. Only index 0 may be None."""

    data: Tuple[int, Any] = Field(default_factory=lambda: (0, None))
    """The union data stored as a (selector, value) tuple."""

    @field_validator("data", mode="before")
    @classmethod
    def _validate_union_data(cls, v: Any) -> Tuple[int, Any]:
        """Validate the option table, the selector and the value of the selected option."""
        options = getattr(cls, "OPTIONS", None)
        if not isinstance(options, tuple) or not options:
            raise SSZTypeError(f"{cls.__name__} must define OPTIONS as a non-empty tuple")
        if len(options) > MAX_UNION_OPTIONS:
            raise SSZTypeError(f"{cls.__name__} has more than {MAX_UNION_OPTIONS} options")
        if any(opt is None for opt in options[1:]):
            raise SSZTypeError(f"{cls.__name__} can only have None at index 0")
        if options == (None,):
            raise SSZTypeError(f"{cls.__name__} cannot have None as the only option")

        if not isinstance(v, tuple) or len(v) != 2:
            raise SSZValueError(f"{cls.__name__} data must be a (selector, value) tuple")
        selector, value = v
        if not isinstance(selector, int) or not 0 <= selector < len(options):
            raise SSZValueError(f"Invalid selector {selector!r} for {len(options)} options")

        selected_type = options[selector]
        if selected_type is None:
            if value is not None:
                raise SSZTypeError("Selected option is None, therefore value must be None")
            return (selector, None)
        if not isinstance(value, selected_type):
            value = cast(Any, selected_type)(value)
        return (selector, value)

    @classmethod
    def some(cls, value: Any) -> Self:
        """Wrap `value` in the first non-None option."""
        return cls(data=(1 if cls.OPTIONS[0] is None else 0, value))

    @property
    def selector(self) -> int:
        """The 0-based index of the currently selected option."""
        return self.data[0]

    @property
    def value(self) -> Any:
        """The value currently stored in this Union."""
        return self.data[1]

    @property
    def selected_type(self) -> Type[SSZType] | None:
        """The type class of the currently selected option."""
        return self.OPTIONS[self.selector]

    @classmethod
    def is_fixed_size(cls) -> bool:
        """Union types are always variable-size in SSZ."""
        return False

    @classmethod
    def get_byte_length(cls) -> int:
        raise SSZTypeError(f"{cls.__name__} is variable-size")

    def serialize(self, stream: IO[bytes]) -> int:
        stream.write(self.selector.to_bytes(SELECTOR_BYTE_SIZE, "little"))
        if self.selected_type is None:
            return SELECTOR_BYTE_SIZE
        return SELECTOR_BYTE_SIZE + cast(SSZType, self.value).serialize(stream)

    @classmethod
    def deserialize(cls, stream: IO[bytes], scope: int) -> Self:
        if scope < SELECTOR_BYTE_SIZE:
            raise SSZDecodeError(cls.__name__, "scope too small for the selector")
        selector = read_exact(stream, SELECTOR_BYTE_SIZE, cls.__name__)[0]
        if selector >= len(cls.OPTIONS):
            raise SSZSelectorError(cls.__name__, selector, len(cls.OPTIONS))

        remaining = scope - SELECTOR_BYTE_SIZE
        selected_type = cls.OPTIONS[selector]
        if selected_type is None:
            if remaining != 0:
                raise SSZDecodeError(cls.__name__, "None arm must have no payload bytes")
            return cls(data=(selector, None))

        return cls(data=(selector, selected_type.deserialize(stream, remaining)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(selector={self.selector}, value={self.value!r})"
