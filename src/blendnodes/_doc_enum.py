"""String enums whose members carry a human-readable description."""

from enum import StrEnum
from typing import Self


class StrEnumWithDoc(StrEnum):
    """String enum whose members take an optional description as a second value.

    ``MEMBER = "value", "what it means"`` stores ``"value"`` as the member value and
    exposes the description as ``MEMBER.__doc__``.
    """

    def __new__(cls, value: str, doc: str = "") -> Self:
        """Create a new enum member with a description."""
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.__doc__ = doc
        return obj

    @property
    def description(self) -> str:
        """The description given at definition time (empty if none)."""
        return self.__doc__ or ""
