"""
Directive parsing for record members.

A member's directive lives under the ``influx`` key of its dataclass field
metadata and follows the micro-grammar::

    directive := "-" | "-" "," options | name? ("," option)*
    option    := "omitzero" | "tag"

Examples::

    @dataclass
    class Sample:
        host: str = influx_field("hostname,tag")   # tag "hostname"
        load: float = influx_field(",omitzero")    # field "load", omitted when 0.0
        debug: str = influx_field("-")             # never encoded
        dash: int = influx_field("-,")             # field named "-"
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Optional, Tuple

LOG = logging.getLogger(__name__)

DIRECTIVE_KEY = 'influx'
TABLE_ATTRIBUTE = '__influx_members__'

OPT_OMITZERO = 'omitzero'
OPT_TAG = 'tag'


@dataclass(frozen=True)
class Directive:
    """Parsed encoding instructions for one member."""
    name: str
    omitzero: bool = False
    tag: bool = False


@dataclass(frozen=True)
class MemberDescriptor:
    """A public record member paired with its directive."""
    identifier: str
    directive: Directive


def influx_field(directive: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field carrying an influx directive.

    Args:
        directive: Directive string, e.g. ``"name,tag"`` or ``",omitzero"``
        **kwargs: Passed through to dataclasses.field()

    Returns:
        A dataclasses.Field with the directive stored in its metadata
    """
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[DIRECTIVE_KEY] = directive
    return field(metadata=metadata, **kwargs)


def parse_directive(identifier: str, annotation: Optional[str]) -> Optional[Directive]:
    """
    Parse a member annotation into a Directive.

    Args:
        identifier: Declared member name, used as the default key
        annotation: Raw directive string, or None when the member has none

    Returns:
        The Directive, or None when the member must be skipped
    """
    if annotation == '-':
        return None
    if annotation is None:
        return Directive(identifier)

    name = identifier
    omitzero = False
    tag = False

    parts = annotation.split(',')
    if parts[0]:
        name = parts[0]
    for option in parts[1:]:
        if option == OPT_OMITZERO:
            omitzero = True
        elif option == OPT_TAG:
            tag = True
        elif option:
            LOG.debug(f"Ignoring unknown influx option '{option}' on member {identifier}")

    return Directive(name, omitzero=omitzero, tag=tag)


def build_descriptors(record_type: type) -> Tuple[MemberDescriptor, ...]:
    """Build the descriptor table for a dataclass type by inspecting its fields."""
    table = []
    for f in fields(record_type):
        # Non-public members are outside the record's contract
        if f.name.startswith('_'):
            continue
        directive = parse_directive(f.name, f.metadata.get(DIRECTIVE_KEY))
        if directive is None:
            continue
        table.append(MemberDescriptor(f.name, directive))
    return tuple(table)


def get_descriptors(record_type: type) -> Tuple[MemberDescriptor, ...]:
    """
    Get the descriptor table for a record type.

    Types decorated with @influx_record carry a table built once at class
    creation; anything else is inspected on every call.
    """
    table = record_type.__dict__.get(TABLE_ATTRIBUTE)
    if table is not None:
        return table
    return build_descriptors(record_type)


def influx_record(cls):
    """Class decorator registering the descriptor table of a dataclass."""
    setattr(cls, TABLE_ATTRIBUTE, build_descriptors(cls))
    LOG.debug(f"Registered influx record {cls.__name__} with {len(getattr(cls, TABLE_ATTRIBUTE))} members")
    return cls
