"""Point model produced by marshal()."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Union

from influxdb_client_3 import Point as InfluxPoint, WritePrecision

FieldValue = Union[int, float, str, bool]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Point:
    """
    A time-series data point.

    Tags hold string values used as dimensions; fields hold typed values.
    The timestamp is captured when the point is created.
    """
    measurement: str
    tags: Dict[str, str] = field(default_factory=dict)
    fields: Dict[str, FieldValue] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_now)

    def to_influx_point(self) -> InfluxPoint:
        """Convert to an influxdb_client_3 Point ready for writing."""
        point = InfluxPoint(self.measurement)
        for key, value in self.tags.items():
            point.tag(key, value)
        for key, value in self.fields.items():
            point.field(key, value)
        point.time(self.timestamp, write_precision=WritePrecision.NS)
        return point

    def to_line_protocol(self) -> str:
        """Render the point in InfluxDB line protocol."""
        return self.to_influx_point().to_line_protocol()
