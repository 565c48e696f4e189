"""
Tests for the core marshaling package.
"""
import logging
import os
import unittest
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import List, Optional
from unittest import mock

from .directive import Directive, get_descriptors, influx_field, influx_record, parse_directive
from .errors import MarshalError, NilInputError, NotAStructError, UnsupportedTypeError, ZeroValueFault
from .marshal import format_tag_value, marshal
from .point import Point
from .valuer import InfluxValuer, has_string_conversion, resolve_value
from .writer_config import WriterConfig
from .zero import is_zero


class Celsius(InfluxValuer):
    def __init__(self, degrees: float):
        self.degrees = degrees

    def influx_value(self):
        return self.degrees


class DuckValuer:
    """Implements influx_value() without inheriting from InfluxValuer."""

    def influx_value(self):
        return "duck"


class Version:
    def __init__(self, major: int, minor: int):
        self.major = major
        self.minor = minor

    def __str__(self):
        return f"{self.major}.{self.minor}"


class ValuerAndStringer:
    def influx_value(self):
        return 7

    def __str__(self):
        return "seven"


class Color(Enum):
    RED = 'red'


@dataclass
class Plain:
    name: str
    count: int
    ratio: float
    enabled: bool


@dataclass
class Inner:
    a: int = 0
    b: str = ""


class TestParseDirective(unittest.TestCase):
    """Test cases for parse_directive."""

    def test_no_annotation(self):
        self.assertEqual(parse_directive("Value", None), Directive("Value"))

    def test_dash_skips(self):
        self.assertIsNone(parse_directive("Value", "-"))

    def test_dash_comma_is_literal_name(self):
        self.assertEqual(parse_directive("Value", "-,"), Directive("-"))
        self.assertEqual(parse_directive("Value", "-,tag"), Directive("-", tag=True))

    def test_name_override(self):
        self.assertEqual(parse_directive("Value", "myName"), Directive("myName"))

    def test_empty_name_keeps_identifier(self):
        self.assertEqual(parse_directive("Value", ",omitzero"), Directive("Value", omitzero=True))
        self.assertEqual(parse_directive("Value", ""), Directive("Value"))

    def test_options_any_order(self):
        expected = Directive("n", omitzero=True, tag=True)
        self.assertEqual(parse_directive("Value", "n,tag,omitzero"), expected)
        self.assertEqual(parse_directive("Value", "n,omitzero,tag"), expected)

    def test_unknown_options_ignored(self):
        self.assertEqual(parse_directive("Value", "n,bogus,,tag"), Directive("n", tag=True))


class TestDescriptors(unittest.TestCase):
    """Test cases for descriptor tables."""

    def test_registered_table_built_once(self):
        @influx_record
        @dataclass
        class Registered:
            host: str = influx_field("hostname,tag")
            hidden: int = influx_field("-", default=0)
            _private: int = 0

        table = Registered.__dict__['__influx_members__']
        self.assertEqual([d.identifier for d in table], ["host"])
        self.assertIs(get_descriptors(Registered), table)

    def test_unregistered_subclass_does_not_inherit_table(self):
        @influx_record
        @dataclass
        class Base:
            a: int = 1

        @dataclass
        class Child(Base):
            b: int = 2

        self.assertEqual([d.identifier for d in get_descriptors(Child)], ["a", "b"])

    def test_influx_field_keeps_metadata(self):
        @dataclass
        class WithMeta:
            value: int = influx_field("v", default=0, metadata={"unit": "ms"})

        f = WithMeta.__dataclass_fields__['value']
        self.assertEqual(f.metadata['unit'], "ms")
        self.assertEqual(f.metadata['influx'], "v")


class TestResolveValue(unittest.TestCase):
    """Test cases for resolve_value."""

    def test_none_is_absent(self):
        self.assertEqual(resolve_value(None), (False, None))

    def test_plain_value(self):
        self.assertEqual(resolve_value(42), (True, 42))
        self.assertEqual(resolve_value("x"), (True, "x"))

    def test_valuer(self):
        self.assertEqual(resolve_value(Celsius(21.5)), (True, 21.5))

    def test_structural_valuer(self):
        self.assertTrue(isinstance(DuckValuer(), InfluxValuer))
        self.assertEqual(resolve_value(DuckValuer()), (True, "duck"))

    def test_stringer(self):
        self.assertEqual(resolve_value(Version(1, 2)), (True, "1.2"))

    def test_valuer_preferred_over_stringer(self):
        self.assertEqual(resolve_value(ValuerAndStringer()), (True, 7))

    def test_builtin_scalars_are_not_stringers(self):
        for value in (1, 1.5, True, "s", b"b", (1, 2), [1], {}):
            self.assertFalse(has_string_conversion(value), value)

    def test_library_types_with_str(self):
        self.assertTrue(has_string_conversion(Decimal("1.5")))
        self.assertTrue(has_string_conversion(Path("/tmp")))
        self.assertEqual(resolve_value(Decimal("1.50")), (True, "1.50"))


class TestIsZero(unittest.TestCase):
    """Test cases for is_zero."""

    def test_scalars(self):
        self.assertTrue(is_zero(False))
        self.assertFalse(is_zero(True))
        self.assertTrue(is_zero(0))
        self.assertFalse(is_zero(-3))
        self.assertTrue(is_zero(""))
        self.assertFalse(is_zero(" "))
        self.assertTrue(is_zero(None))

    def test_float_bit_pattern(self):
        self.assertTrue(is_zero(0.0))
        self.assertFalse(is_zero(-0.0))
        self.assertFalse(is_zero(float('nan')))
        self.assertFalse(is_zero(1e-300))

    def test_complex(self):
        self.assertTrue(is_zero(0j))
        self.assertFalse(is_zero(complex(0.0, -0.0)))

    def test_tuple_is_zero_when_all_items_zero(self):
        Pair = namedtuple('Pair', 'x y')
        self.assertTrue(is_zero((0, "", 0.0)))
        self.assertFalse(is_zero((0, "a")))
        self.assertTrue(is_zero(Pair(0, 0)))
        self.assertTrue(is_zero(()))

    def test_dataclass_composite(self):
        self.assertTrue(is_zero(Inner()))
        self.assertFalse(is_zero(Inner(b="x")))

    def test_containers(self):
        self.assertTrue(is_zero([]))
        self.assertTrue(is_zero({}))
        self.assertTrue(is_zero(set()))
        self.assertFalse(is_zero([0]))
        self.assertFalse(is_zero({"k": 0}))

    def test_unknown_kind_faults(self):
        with self.assertRaises(ZeroValueFault):
            is_zero(object())


class TestFormatTagValue(unittest.TestCase):
    """Test cases for tag value rendering."""

    def test_rendering(self):
        self.assertEqual(format_tag_value(42), "42")
        self.assertEqual(format_tag_value(-7), "-7")
        self.assertEqual(format_tag_value(1234567), "1234567")
        self.assertEqual(format_tag_value(0.1), "0.1")
        self.assertEqual(format_tag_value(1e21), "1e+21")
        self.assertEqual(format_tag_value(True), "true")
        self.assertEqual(format_tag_value(False), "false")
        self.assertEqual(format_tag_value("rack 1"), "rack 1")


class TestMarshal(unittest.TestCase):
    """Test cases for marshal."""

    def test_no_annotations(self):
        p = marshal(Plain("disk", 3, 0.5, True), "m")
        self.assertEqual(p.measurement, "m")
        self.assertEqual(p.tags, {})
        self.assertEqual(p.fields, {"name": "disk", "count": 3, "ratio": 0.5, "enabled": True})

    def test_timestamp_is_now(self):
        before = datetime.now(timezone.utc)
        p = marshal(Plain("disk", 3, 0.5, True), "m")
        after = datetime.now(timezone.utc)
        self.assertTrue(before <= p.timestamp <= after)

    def test_pointer_like_input_is_nil(self):
        with self.assertRaises(NilInputError):
            marshal(None, "m")

    def test_not_a_struct(self):
        for value in (5, "text", {"a": 1}, [1, 2], Plain):
            with self.assertRaises(NotAStructError):
                marshal(value, "m")

    def test_errors_share_base_class(self):
        self.assertTrue(issubclass(NilInputError, MarshalError))
        self.assertTrue(issubclass(NotAStructError, MarshalError))
        self.assertTrue(issubclass(UnsupportedTypeError, MarshalError))

    def test_skip_dash(self):
        @dataclass
        class Rec:
            value: int = influx_field("-")
            kept: int = 1

        for value in (0, 5, "x", [1]):
            p = marshal(Rec(value=value), "m")
            self.assertNotIn("value", p.fields)
            self.assertNotIn("-", p.fields)
            self.assertEqual(p.fields, {"kept": 1})

    def test_dash_comma_field(self):
        @dataclass
        class Rec:
            value: int = influx_field("-,")
            tagged: int = influx_field("-,tag")

        p = marshal(Rec(value=3, tagged=4), "m")
        self.assertEqual(p.fields, {"-": 3})
        self.assertEqual(p.tags, {"-": "4"})

    def test_omitzero(self):
        @dataclass
        class Rec:
            count: int = influx_field("n,omitzero")
            label: str = influx_field(",omitzero,tag")

        p = marshal(Rec(count=0, label=""), "m")
        self.assertEqual(p.fields, {})
        self.assertEqual(p.tags, {})

        p = marshal(Rec(count=2, label="a"), "m")
        self.assertEqual(p.fields, {"n": 2})
        self.assertEqual(p.tags, {"label": "a"})

    def test_zero_without_omitzero_is_kept(self):
        p = marshal(Plain("", 0, 0.0, False), "m")
        self.assertEqual(p.fields, {"name": "", "count": 0, "ratio": 0.0, "enabled": False})

    def test_negative_zero_not_omitted(self):
        @dataclass
        class Rec:
            value: float = influx_field(",omitzero")

        self.assertEqual(marshal(Rec(0.0), "m").fields, {})
        self.assertIn("value", marshal(Rec(-0.0), "m").fields)

    def test_tag_versus_field(self):
        @dataclass
        class Tagged:
            value: int = influx_field("answer,tag")

        @dataclass
        class Untagged:
            value: int = influx_field("answer")

        self.assertEqual(marshal(Tagged(42), "m").tags, {"answer": "42"})
        fields = marshal(Untagged(42), "m").fields
        self.assertEqual(fields, {"answer": 42})
        self.assertIsInstance(fields["answer"], int)

    def test_bool_and_float_tags(self):
        @dataclass
        class Rec:
            up: bool = influx_field(",tag")
            ratio: float = influx_field(",tag")

        self.assertEqual(marshal(Rec(True, 2.5), "m").tags, {"up": "true", "ratio": "2.5"})

    def test_nil_member_omitted(self):
        @dataclass
        class Rec:
            a: Optional[int] = None
            b: Optional[int] = influx_field(",omitzero", default=None)
            c: Optional[str] = influx_field("c,tag", default=None)

        p = marshal(Rec(), "m")
        self.assertEqual(p.fields, {})
        self.assertEqual(p.tags, {})

    def test_private_members_skipped(self):
        @dataclass
        class Rec:
            public: int = 1
            _private: int = influx_field("private", default=2)

        self.assertEqual(marshal(Rec(), "m").fields, {"public": 1})

    def test_valuer_routes_through_returned_value(self):
        @dataclass
        class Rec:
            temp: Celsius = influx_field("temp")
            site: DuckValuer = influx_field(",tag")

        p = marshal(Rec(Celsius(19.5), DuckValuer()), "m")
        self.assertEqual(p.fields, {"temp": 19.5})
        self.assertEqual(p.tags, {"site": "duck"})

    def test_valuer_returning_zero_omitted(self):
        @dataclass
        class Rec:
            temp: Celsius = influx_field(",omitzero")

        self.assertEqual(marshal(Rec(Celsius(0.0)), "m").fields, {})

    def test_stringer_members(self):
        @dataclass
        class Rec:
            version: Version = influx_field(",tag")
            color: Color = Color.RED

        p = marshal(Rec(Version(2, 1)), "m")
        self.assertEqual(p.tags, {"version": "2.1"})
        self.assertEqual(p.fields, {"color": str(Color.RED)})

    def test_unsupported_type(self):
        @dataclass
        class Rec:
            ok: int = 1
            items: List[int] = field(default_factory=lambda: [1, 2])

        with self.assertRaises(UnsupportedTypeError) as ctx:
            marshal(Rec(), "m")
        self.assertEqual(ctx.exception.member, "items")
        self.assertIn("items", str(ctx.exception))

    def test_nested_record_unsupported(self):
        @dataclass
        class Outer:
            inner: Inner = field(default_factory=lambda: Inner(a=1))

        with self.assertRaises(UnsupportedTypeError):
            marshal(Outer(), "m")

    def test_zero_nested_record_omitted(self):
        @dataclass
        class Outer:
            inner: Inner = influx_field(",omitzero", default_factory=Inner)
            empty: list = influx_field(",omitzero", default_factory=list)

        self.assertEqual(marshal(Outer(), "m").fields, {})

    def test_omitzero_plain_object_unsupported(self):
        class Handle:
            pass

        @dataclass
        class Rec:
            h: Handle = influx_field(",omitzero", default_factory=Handle)

        @dataclass
        class Callback:
            cb: object = influx_field(",omitzero", default=len)

        with self.assertRaises(UnsupportedTypeError) as ctx:
            marshal(Rec(), "m")
        self.assertEqual(ctx.exception.member, "h")
        self.assertIs(ctx.exception.value_type, Handle)

        with self.assertRaises(UnsupportedTypeError) as ctx:
            marshal(Callback(), "m")
        self.assertEqual(ctx.exception.member, "cb")

    def test_scalar_subclasses_stored_as_builtins(self):
        class Label(str):
            pass

        class Count(int):
            pass

        class Ratio(float):
            pass

        @dataclass
        class Rec:
            label: Label
            count: Count
            ratio: Ratio
            host: Label = influx_field(",tag", default=Label("db1"))

        p = marshal(Rec(Label("ssd"), Count(3), Ratio(0.5)), "m")
        self.assertEqual(p.fields, {"label": "ssd", "count": 3, "ratio": 0.5})
        self.assertIs(type(p.fields["label"]), str)
        self.assertIs(type(p.fields["count"]), int)
        self.assertIs(type(p.fields["ratio"]), float)
        self.assertEqual(p.tags, {"host": "db1"})
        self.assertIs(type(p.tags["host"]), str)

    def test_duplicate_names_last_wins(self):
        @dataclass
        class Rec:
            first: int = influx_field("value", default=1)
            second: int = influx_field("value", default=2)
            t1: str = influx_field("k,tag", default="a")
            t2: str = influx_field("k,tag", default="b")

        p = marshal(Rec(), "m")
        self.assertEqual(p.fields, {"value": 2})
        self.assertEqual(p.tags, {"k": "b"})

    def test_registered_record(self):
        @influx_record
        @dataclass
        class Sample:
            host: str = influx_field("hostname,tag")
            load: float = influx_field(",omitzero", default=0.0)

        p = marshal(Sample("db1", 0.75), "cpu")
        self.assertEqual(p.tags, {"hostname": "db1"})
        self.assertEqual(p.fields, {"load": 0.75})
        self.assertEqual(marshal(Sample("db1"), "cpu").fields, {})

    def test_no_partial_point_on_error(self):
        @dataclass
        class Rec:
            good: int = 1
            bad: dict = field(default_factory=lambda: {"a": 1})

        result = None
        with self.assertRaises(UnsupportedTypeError):
            result = marshal(Rec(), "m")
        self.assertIsNone(result)


class TestPoint(unittest.TestCase):
    """Test cases for Point conversion."""

    def test_line_protocol(self):
        ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        p = Point("cpu", tags={"host": "db1"}, fields={"load": 0.5, "cores": 8}, timestamp=ts)
        line = p.to_line_protocol()
        self.assertTrue(line.startswith("cpu,host=db1 "))
        self.assertIn("load=0.5", line)
        self.assertIn("cores=8i", line)
        self.assertTrue(line.endswith(str(int(ts.timestamp()) * 1_000_000_000)))


class TestWriterConfig(unittest.TestCase):
    """Test cases for WriterConfig."""

    def test_requires_connection_settings(self):
        with self.assertRaises(ValueError):
            WriterConfig(influxdb_url="https://influx:8181", influxdb_token="t")

    def test_rejects_bad_batch_size(self):
        with self.assertRaises(ValueError):
            WriterConfig("https://influx:8181", "t", "db", batch_size=0)

    def test_from_env(self):
        env = {
            'INFLUXDB_URL': 'https://tsdb:8181',
            'INFLUXDB_TOKEN': 'secret',
            'INFLUXDB_DATABASE': 'metrics',
        }
        with mock.patch.dict(os.environ, env, clear=True):
            config = WriterConfig.from_env(influxdb_database='override')
        self.assertEqual(config.influxdb_url, 'https://tsdb:8181')
        self.assertEqual(config.influxdb_token, 'secret')
        self.assertEqual(config.influxdb_database, 'override')
        self.assertIsNone(config.tls_ca)
        self.assertEqual(config.batch_size, 500)


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
