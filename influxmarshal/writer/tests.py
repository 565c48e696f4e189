"""
Tests for the writer module.
"""
import logging
import unittest
from dataclasses import dataclass
from unittest import mock

import requests

from .base import Writer
from .influxdb_writer import BatchingCallback, InfluxDBWriter
from ..core.directive import influx_field
from ..core.errors import UnsupportedTypeError
from ..core.point import Point
from ..core.writer_config import WriterConfig


@dataclass
class DiskSample:
    disk: str = influx_field("disk,tag")
    iops: int = influx_field(",omitzero", default=0)


@dataclass
class BrokenSample:
    disk: str = influx_field("disk,tag")
    history: list = None


class RecordingWriter(Writer):
    """Writer keeping points in memory."""

    def __init__(self):
        self.points = []

    def write(self, points):
        self.points.extend(points)
        return True


class TestWriteRecords(unittest.TestCase):
    """Test cases for Writer.write_records."""

    def test_marshals_and_writes(self):
        writer = RecordingWriter()
        self.assertTrue(writer.write_records([DiskSample("sda", 10), DiskSample("sdb")], "disk_io"))
        self.assertEqual(len(writer.points), 2)
        self.assertEqual(writer.points[0].tags, {"disk": "sda"})
        self.assertEqual(writer.points[0].fields, {"iops": 10})
        self.assertEqual(writer.points[1].fields, {})
        self.assertEqual(writer.points[1].measurement, "disk_io")
        self.assertIsNone(writer.close())

    def test_marshal_error_writes_nothing(self):
        writer = RecordingWriter()
        records = [DiskSample("sda", 1), BrokenSample("sdb", history=[1])]
        with self.assertRaises(UnsupportedTypeError):
            writer.write_records(records, "disk_io")
        self.assertEqual(writer.points, [])


class TestBatchingCallback(unittest.TestCase):
    """Test cases for BatchingCallback."""

    def test_stats(self):
        callback = BatchingCallback()
        callback.success(None, "abc")
        callback.retry(None, "abc", Exception("slow"))
        callback.error(None, "abc", Exception("boom"))
        stats = callback.get_stats()
        self.assertEqual(stats['writes'], 1)
        self.assertEqual(stats['retries'], 1)
        self.assertEqual(stats['errors'], 1)
        self.assertEqual(stats['status'], "FAILURE: boom")
        self.assertGreaterEqual(stats['elapsed_ms'], 0)


class TestInfluxDBWriter(unittest.TestCase):
    """Test cases for InfluxDBWriter with the client mocked out."""

    def setUp(self):
        self.config = WriterConfig(
            influxdb_url="https://influx:8181",
            influxdb_token="token",
            influxdb_database="metrics",
        )
        patcher = mock.patch('influxmarshal.writer.influxdb_writer.InfluxDBClient3')
        self.client_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = self.client_class.return_value

    def test_client_configuration(self):
        InfluxDBWriter(self.config)
        kwargs = self.client_class.call_args.kwargs
        self.assertEqual(kwargs['host'], "https://influx:8181")
        self.assertEqual(kwargs['database'], "metrics")
        self.assertEqual(kwargs['token'], "token")
        self.assertNotIn('ssl_ca_cert', kwargs)

    def test_write_points(self):
        writer = InfluxDBWriter(self.config)
        points = [Point("cpu", tags={"host": "a"}, fields={"load": 1.0}),
                  Point("cpu", tags={"host": "b"}, fields={"load": 2.0})]
        self.assertTrue(writer.write(points))
        self.assertEqual(self.client.write.call_count, 2)
        record = self.client.write.call_args.kwargs['record']
        self.assertIn("host=b", record.to_line_protocol())

    def test_write_failure_reported(self):
        self.client.write.side_effect = [None, RuntimeError("down")]
        writer = InfluxDBWriter(self.config)
        points = [Point("cpu", fields={"load": 1.0}), Point("cpu", fields={"load": 2.0})]
        self.assertFalse(writer.write(points))

    def test_write_after_close(self):
        writer = InfluxDBWriter(self.config)
        writer.close(timeout_seconds=5)
        self.client.close.assert_called_once()
        self.assertFalse(writer.write([Point("cpu", fields={"load": 1.0})]))

    @mock.patch('influxmarshal.writer.influxdb_writer.requests')
    def test_creates_missing_database(self, mock_requests):
        mock_requests.RequestException = requests.RequestException
        mock_requests.get.return_value = mock.Mock(status_code=200, json=lambda: [{"iox::database": "other"}])
        mock_requests.post.return_value = mock.Mock(status_code=201)
        self.config.create_database = True

        InfluxDBWriter(self.config)

        mock_requests.post.assert_called_once()
        self.assertEqual(mock_requests.post.call_args.kwargs['json'], {"db": "metrics"})

    @mock.patch('influxmarshal.writer.influxdb_writer.requests')
    def test_existing_database_not_created(self, mock_requests):
        mock_requests.RequestException = requests.RequestException
        mock_requests.get.return_value = mock.Mock(status_code=200, json=lambda: ["metrics"])
        writer = InfluxDBWriter(self.config)

        self.assertTrue(writer._ensure_database_exists())
        mock_requests.post.assert_not_called()

    @mock.patch('influxmarshal.writer.influxdb_writer.requests')
    def test_database_check_connection_error(self, mock_requests):
        mock_requests.RequestException = requests.RequestException
        mock_requests.get.side_effect = requests.ConnectionError("refused")
        writer = InfluxDBWriter(self.config)

        self.assertFalse(writer._ensure_database_exists())


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
