"""Strict, immutable pydantic base model shared by every container and config."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    A frozen pydantic model that rejects unknown fields and implicit coercion.

    Light client state is replaced, never edited in place, so every model in
    the package derives from this class and uses `replace` to build the next
    version of a value.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        populate_by_name=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def replace(self: Self, **changes: Any) -> Self:
        """Return a validated copy with `changes` applied."""
        fields = {name: getattr(self, name) for name in type(self).model_fields}
        return self.__class__(**(fields | changes))
