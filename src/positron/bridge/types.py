"""Sized integer annotations for bound function parameters.

Plain ``int`` decodes with Python's natural precision. When a parameter
must fit a fixed width, annotate it with one of these aliases and an
out-of-range number fails the call with ``Overflow``::

    def set_volume(app, level: UInt8) -> None: ...
"""

from dataclasses import dataclass
from typing import Annotated


@dataclass(frozen=True, slots=True)
class IntRange:
    """Inclusive bounds for an integer parameter."""

    minimum: int
    maximum: int

    def __contains__(self, value: object) -> bool:
        return isinstance(value, int) and self.minimum <= value <= self.maximum

    @classmethod
    def signed(cls, bits: int) -> "IntRange":
        return cls(-(1 << (bits - 1)), (1 << (bits - 1)) - 1)

    @classmethod
    def unsigned(cls, bits: int) -> "IntRange":
        return cls(0, (1 << bits) - 1)


Int8 = Annotated[int, IntRange.signed(8)]
Int16 = Annotated[int, IntRange.signed(16)]
Int32 = Annotated[int, IntRange.signed(32)]
Int64 = Annotated[int, IntRange.signed(64)]
UInt8 = Annotated[int, IntRange.unsigned(8)]
UInt16 = Annotated[int, IntRange.unsigned(16)]
UInt32 = Annotated[int, IntRange.unsigned(32)]
UInt64 = Annotated[int, IntRange.unsigned(64)]
