"""Writer module.

Provides writers handing marshaled points to a time-series store.
"""

from .base import Writer
from .influxdb_writer import InfluxDBWriter

__all__ = ['Writer', 'InfluxDBWriter']
