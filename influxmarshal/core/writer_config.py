"""Writer configuration.

Keeps transport settings apart from the marshaling code, which needs none.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class WriterConfig:
    """Settings for writing points to InfluxDB 3.x."""

    influxdb_url: Optional[str] = None
    influxdb_token: Optional[str] = None
    influxdb_database: Optional[str] = None

    # Custom CA bundle for TLS validation
    tls_ca: Optional[str] = None

    # Client-side batching
    batch_size: int = 500
    flush_interval: int = 60_000  # ms

    create_database: bool = False

    def __post_init__(self):
        """Validate writer configuration after initialization."""
        for name in ('influxdb_url', 'influxdb_token', 'influxdb_database'):
            if not getattr(self, name):
                raise ValueError(f"{name} required for InfluxDB output")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.flush_interval <= 0:
            raise ValueError("flush_interval must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> 'WriterConfig':
        """Create WriterConfig from INFLUXDB_* environment variables.

        Args:
            **overrides: Explicit values taking precedence over the environment

        Returns:
            WriterConfig populated from the environment
        """
        values: Dict[str, Any] = {
            'influxdb_url': os.getenv('INFLUXDB_URL', 'https://influxdb:8181'),
            'influxdb_token': os.getenv('INFLUXDB_TOKEN', ''),
            'influxdb_database': os.getenv('INFLUXDB_DATABASE'),
            'tls_ca': os.getenv('INFLUXDB3_TLS_CA'),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
