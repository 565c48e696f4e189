"""Core marshaling package initialization."""

from .directive import Directive, influx_field, influx_record, parse_directive
from .errors import MarshalError, NilInputError, NotAStructError, UnsupportedTypeError, ZeroValueFault
from .marshal import marshal
from .point import Point
from .valuer import InfluxValuer
from .writer_config import WriterConfig

__all__ = [
    'marshal', 'Point', 'Directive', 'influx_field', 'influx_record', 'parse_directive',
    'InfluxValuer', 'MarshalError', 'NilInputError', 'NotAStructError',
    'UnsupportedTypeError', 'ZeroValueFault', 'WriterConfig',
]
