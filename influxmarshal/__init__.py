"""Marshal dataclass records into InfluxDB points."""

from .core import (
    Directive, InfluxValuer, MarshalError, NilInputError, NotAStructError, Point,
    UnsupportedTypeError, WriterConfig, ZeroValueFault, influx_field, influx_record,
    marshal, parse_directive,
)

__all__ = [
    'marshal', 'Point', 'Directive', 'influx_field', 'influx_record', 'parse_directive',
    'InfluxValuer', 'MarshalError', 'NilInputError', 'NotAStructError',
    'UnsupportedTypeError', 'ZeroValueFault', 'WriterConfig',
]
