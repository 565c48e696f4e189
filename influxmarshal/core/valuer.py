"""
Value resolution for record members.

A member value is turned into the scalar that ends up in the point:
None is an absent value and is skipped, types implementing InfluxValuer
supply their own value, types overriding __str__ are rendered as text,
and everything else is used as-is.
"""

from abc import ABC, abstractmethod
from typing import Any, Tuple


class InfluxValuer(ABC):
    """
    Interface for types that supply their own tag or field value.

    Any class defining an ``influx_value()`` method is treated as an
    InfluxValuer, whether or not it inherits from this class.
    """

    @abstractmethod
    def influx_value(self) -> Any:
        """Return the value to store in place of this object."""

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is InfluxValuer:
            for klass in subclass.__mro__:
                if 'influx_value' in klass.__dict__:
                    return callable(klass.__dict__['influx_value'])
        return NotImplemented


# __str__ implementations that do not count as a string conversion capability
_PLAIN_STR = frozenset({
    object.__str__,
    str.__str__,
    int.__str__,
    float.__str__,
    bool.__str__,
    complex.__str__,
    bytes.__str__,
    bytearray.__str__,
})


def has_string_conversion(value: Any) -> bool:
    """True if the value's type provides its own textual representation."""
    return type(value).__str__ not in _PLAIN_STR


def resolve_value(value: Any) -> Tuple[bool, Any]:
    """
    Resolve a member value.

    Args:
        value: Raw member value

    Returns:
        Tuple of (present, resolved value). present is False when the
        member holds no value and must be skipped.
    """
    if value is None:
        return False, None

    if isinstance(value, InfluxValuer):
        return True, value.influx_value()
    if has_string_conversion(value):
        return True, str(value)
    return True, value
