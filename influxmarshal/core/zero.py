"""Zero-value detection used by the omitzero directive option."""

import struct
from collections.abc import Mapping, Sequence, Set
from dataclasses import fields, is_dataclass
from typing import Any

from .errors import ZeroValueFault

_ZERO_BITS = struct.pack('<d', 0.0)


def _float_is_zero(value: float) -> bool:
    # Bit comparison, so -0.0 is not considered zero
    return struct.pack('<d', value) == _ZERO_BITS


def is_zero(value: Any) -> bool:
    """
    Report whether a value is the zero value of its kind.

    Raises:
        ZeroValueFault: value is of a kind without a zero value
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, int):
        return value == 0
    if isinstance(value, float):
        return _float_is_zero(value)
    if isinstance(value, complex):
        return _float_is_zero(value.real) and _float_is_zero(value.imag)
    if isinstance(value, (str, bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, tuple):
        return all(is_zero(item) for item in value)
    if is_dataclass(value) and not isinstance(value, type):
        return all(is_zero(getattr(value, f.name)) for f in fields(value))
    if isinstance(value, (Mapping, Sequence, Set)):
        return len(value) == 0
    raise ZeroValueFault(type(value))
