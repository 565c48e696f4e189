"""
Base writer interface for handing points to a time-series store.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List

from ..core.marshal import marshal
from ..core.point import Point

# Initialize logger
LOG = logging.getLogger(__name__)


class Writer(ABC):
    """
    Base class for all writers.
    """

    @abstractmethod
    def write(self, points: Iterable[Point]) -> bool:
        """
        Write points to the destination.

        Args:
            points: Points to write

        Returns:
            True if write was successful, False otherwise
        """
        pass

    def write_records(self, records: Iterable[Any], measurement: str) -> bool:
        """
        Marshal records and write the resulting points.

        All records are marshaled before anything is written, so a record
        that fails to marshal leaves the destination untouched.

        Args:
            records: Dataclass instances to encode
            measurement: Measurement name for every point

        Returns:
            Result of write()

        Raises:
            MarshalError: a record could not be marshaled
        """
        points: List[Point] = [marshal(record, measurement) for record in records]
        LOG.debug(f"Marshaled {len(points)} records for {measurement}")
        return self.write(points)

    def close(self, timeout_seconds: int = 90) -> None:
        """
        Optional method to close the writer and clean up resources.
        Default implementation does nothing - override in subclasses that need cleanup.

        Args:
            timeout_seconds: Timeout for cleanup operations
        """
