"""
Record to point marshaling.

marshal() walks the first level of a dataclass instance and builds a
Point from its public members. Each member goes through directive
parsing, value resolution, optional zero-value omission and type
validation before landing in the point's tags or fields.

Nested records are not traversed. A member holding a dataclass must
implement InfluxValuer (or override __str__) to be encoded.
"""

import logging
from dataclasses import is_dataclass
from typing import Any

from .directive import Directive, get_descriptors
from .errors import NilInputError, NotAStructError, UnsupportedTypeError, ZeroValueFault
from .point import Point
from .valuer import resolve_value
from .zero import is_zero

LOG = logging.getLogger(__name__)

SUPPORTED_TYPES = (bool, int, float, str)


def native_value(value: Any) -> Any:
    """Strip subclasses (enums and the like) down to the builtin scalar type."""
    if isinstance(value, bool):
        return bool(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    return str.__str__(value)


def format_tag_value(value: Any) -> str:
    """Render a scalar as a tag value."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        return repr(float(value))
    if isinstance(value, int):
        return str(int(value))
    return str(value)


def assemble(point: Point, member: str, directive: Directive, value: Any) -> None:
    """
    Store a resolved value into the point.

    Args:
        point: Point being built
        member: Declared member name, used in error messages
        directive: Parsed directive of the member
        value: Resolved value

    Raises:
        UnsupportedTypeError: value is not an int, float, str or bool
    """
    if not isinstance(value, SUPPORTED_TYPES):
        raise UnsupportedTypeError(member, type(value))

    # Later members overwrite earlier ones with the same name
    if directive.tag:
        point.tags[directive.name] = format_tag_value(value)
    else:
        point.fields[directive.name] = native_value(value)


def marshal(record: Any, measurement: str) -> Point:
    """
    Marshal a dataclass instance into a Point.

    Args:
        record: Dataclass instance to encode
        measurement: Measurement name of the resulting point

    Returns:
        The assembled Point, timestamped now

    Raises:
        NilInputError: record is None
        NotAStructError: record is not a dataclass instance
        UnsupportedTypeError: a member resolved to an unsupported type
    """
    if record is None:
        raise NilInputError()
    if not is_dataclass(record) or isinstance(record, type):
        raise NotAStructError(type(record))

    point = Point(measurement)

    for descriptor in get_descriptors(type(record)):
        member = descriptor.identifier
        directive = descriptor.directive

        present, value = resolve_value(getattr(record, member))
        if not present:
            LOG.debug(f"Skipping nil member {member}")
            continue

        if directive.omitzero:
            try:
                zero = is_zero(value)
            except ZeroValueFault as e:
                # Kinds without a zero value are never storable either
                raise UnsupportedTypeError(member, e.value_type) from e
            if zero:
                LOG.debug(f"Omitting zero-valued member {member}")
                continue

        assemble(point, member, directive, value)

    LOG.debug(f"Marshaled {type(record).__name__} into {measurement}: "
              f"{len(point.tags)} tags, {len(point.fields)} fields")
    return point
