"""
InfluxDB writer.
Writes marshaled points to InfluxDB 3.x using client-side batching.

Note: batching follows batching_example.py from the https://github.com/InfluxCommunity/influxdb3-python project
License: Apache License, Version 2.0, January 2004 (http://www.apache.org/licenses/)
"""

import logging
import os
import threading
import time
from typing import Any, Dict, Iterable, Optional

import requests
from influxdb_client_3 import InfluxDBClient3, WriteOptions, write_client_options
from influxdb_client_3.exceptions.exceptions import InfluxDBError

from .base import Writer
from ..core.point import Point
from ..core.writer_config import WriterConfig

LOG = logging.getLogger(__name__)


class BatchingCallback(object):
    """
    Callback handler for batched InfluxDB writes.

    Tracks write success/failure statistics and provides timing information.
    """

    def __init__(self):
        self.write_status_msg = None
        self.write_count = 0
        self.error_count = 0
        self.retry_count = 0
        self.start = time.time_ns()

    def success(self, conf, data: str):
        """Called when a batch write succeeds."""
        self.write_count += 1
        self.write_status_msg = f"SUCCESS: {self.write_count} batches written"
        LOG.debug(f"Batch write successful: {len(data)} bytes")

    def error(self, conf, data: str, exception: InfluxDBError):
        """Called when a batch write fails permanently."""
        self.error_count += 1
        self.write_status_msg = f"FAILURE: {exception}"
        LOG.error(f"Batch write failed: {len(data)} bytes, error: {exception}")

    def retry(self, conf, data: str, exception: InfluxDBError):
        """Called when a batch write fails but will be retried."""
        self.retry_count += 1
        LOG.warning(f"Batch write retry {self.retry_count}: {len(data)} bytes, error: {exception}")

    def elapsed_ms(self) -> int:
        """Get elapsed time in milliseconds."""
        return (time.time_ns() - self.start) // 1_000_000

    def get_stats(self) -> Dict[str, Any]:
        """Get write statistics."""
        return {
            'writes': self.write_count,
            'errors': self.error_count,
            'retries': self.retry_count,
            'elapsed_ms': self.elapsed_ms(),
            'status': self.write_status_msg
        }


class InfluxDBWriter(Writer):
    """
    Writer implementation for InfluxDB 3.x.

    Points are converted with Point.to_influx_point() and submitted one by
    one; the client groups them into batches per its WriteOptions.
    """

    def __init__(self, config: WriterConfig):
        """Initialize InfluxDB writer with configuration."""
        self.url = config.influxdb_url
        self.token = config.influxdb_token
        self.database = config.influxdb_database
        self.tls_ca = config.tls_ca
        self.batch_size = config.batch_size
        self.flush_interval = config.flush_interval

        self.batch_callback = BatchingCallback()

        self.client: Optional[InfluxDBClient3] = None
        self._initialize_client()

        if config.create_database:
            self._ensure_database_exists()

        LOG.info(f"InfluxDBWriter initialized: {self.url} -> {self.database}")

    def _ca_cert_path(self) -> Optional[str]:
        """Return the custom CA certificate path if one is configured and present."""
        if self.tls_ca and os.path.exists(self.tls_ca):
            return self.tls_ca
        if self.tls_ca:
            LOG.warning(f"CA certificate path specified but file not found: {self.tls_ca}")
        return None

    def _initialize_client(self):
        """Initialize the InfluxDB client with batching and TLS configuration."""
        write_options = WriteOptions(
            batch_size=self.batch_size,
            flush_interval=self.flush_interval,
            jitter_interval=2_000,       # 2 seconds
            retry_interval=5_000,        # 5 seconds
            max_retries=2,
            max_retry_delay=15_000,      # 15 seconds
            max_close_wait=60_000,       # 60 seconds
            exponential_base=2
        )

        wco = write_client_options(
            success_callback=self.batch_callback.success,
            error_callback=self.batch_callback.error,
            retry_callback=self.batch_callback.retry,
            write_options=write_options
        )

        client_kwargs = {
            'host': self.url,
            'database': self.database,
            'token': self.token,
            'enable_gzip': True,
            'write_client_options': wco,
            'verify_ssl': True,
            'timeout': 60000  # ms
        }

        ca_cert_path = self._ca_cert_path()
        if ca_cert_path:
            LOG.info(f"Using custom CA certificate: {ca_cert_path}")
            client_kwargs['ssl_ca_cert'] = ca_cert_path

        try:
            self.client = InfluxDBClient3(**client_kwargs)
        except Exception as e:
            LOG.error(f"Failed to create InfluxDB client: {e}")
            raise
        LOG.info(f"InfluxDB client created for {self.url}")

    def _ensure_database_exists(self) -> bool:
        """
        Ensure the target database exists, creating it if necessary.

        Returns:
            True if the database exists or was created, False otherwise
        """
        headers = {
            'Authorization': f'Bearer {self.token}',
            'Accept': 'application/json'
        }
        verify_tls = self._ca_cert_path() or True

        try:
            response = requests.get(f"{self.url}/api/v3/configure/database?format=json",
                                    headers=headers, timeout=10, verify=verify_tls)
            if response.status_code != 200:
                LOG.warning(f"Failed to check database existence: HTTP {response.status_code}")
                return False

            databases_data = response.json()
            # [{"iox::database": "name"}, ...], a plain list of names, or {"databases": [...]}
            if isinstance(databases_data, dict):
                databases = databases_data.get('databases', [])
            elif databases_data and isinstance(databases_data[0], dict):
                databases = [db.get('iox::database') for db in databases_data]
            else:
                databases = list(databases_data)

            if self.database in databases:
                LOG.info(f"Database '{self.database}' already exists")
                return True

            LOG.info(f"Database '{self.database}' does not exist, creating it")
            create_response = requests.post(f"{self.url}/api/v3/configure/database",
                                            json={"db": self.database}, headers=headers,
                                            timeout=10, verify=verify_tls)
            if create_response.status_code in (200, 201, 204):
                LOG.info(f"Successfully created database '{self.database}'")
                return True
            LOG.error(f"Failed to create database '{self.database}': HTTP {create_response.status_code}")
            return False

        except (requests.RequestException, ValueError) as e:
            LOG.warning(f"Could not verify database existence (will be created on first write): {e}")
            return False

    def write(self, points: Iterable[Point]) -> bool:
        """
        Write points to InfluxDB using automatic client-side batching.

        Args:
            points: Points to write

        Returns:
            bool: True if all points were submitted, False otherwise
        """
        if not self.client:
            LOG.error("InfluxDB client not available")
            return False

        success = True
        written_count = 0

        for point in points:
            try:
                self.client.write(record=point.to_influx_point())
                written_count += 1
            except Exception as e:
                LOG.error(f"Failed to write point for {point.measurement}: {e}")
                success = False

        if written_count > 0:
            LOG.info(f"InfluxDB write submitted: {written_count} points (batched by client)")

        return success

    def get_batch_stats(self) -> Dict[str, Any]:
        """
        Get batching statistics from the client's automatic batching.

        Returns:
            Dictionary with batching statistics
        """
        return self.batch_callback.get_stats()

    def close(self, timeout_seconds: int = 90) -> None:
        """Close the InfluxDB client connection with timeout.

        Args:
            timeout_seconds: Maximum time to wait for graceful close
        """
        if not self.client:
            return

        LOG.info(f"Closing InfluxDB client with {timeout_seconds}s timeout...")
        client = self.client
        close_completed = threading.Event()
        close_error = []

        def close_thread():
            try:
                client.close()
            except Exception as e:
                close_error.append(e)
            finally:
                close_completed.set()

        closer = threading.Thread(target=close_thread, daemon=True)
        closer.start()

        if close_completed.wait(timeout_seconds):
            if close_error:
                LOG.warning(f"Close completed with errors: {close_error[0]}")
            else:
                LOG.info("InfluxDB client closed successfully within timeout")
        else:
            LOG.warning(f"InfluxDB client close timed out after {timeout_seconds}s - pending writes may be lost")

        self.client = None
