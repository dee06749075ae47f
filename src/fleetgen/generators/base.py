"""Base interface for per-tick record factories."""
from abc import ABC, abstractmethod
from datetime import datetime

from fleetgen.generators.identity import IdentityHasher
from fleetgen.models import GeneratedRecord, VehicleData, utc_timestamp


class RecordFactory(ABC):
    """Abstract base class for vehicle record factories."""

    def __init__(self, hasher: IdentityHasher | None = None):
        """Initialize the factory.

        Args:
            hasher: Identifier strategy (defaults to SHA-256 over the canonical fields)
        """
        self.hasher = hasher or IdentityHasher()

    @abstractmethod
    def sample(self) -> VehicleData:
        """Sample the five vehicle fields.

        Returns:
            Freshly sampled vehicle data
        """
        pass

    def create(self, now: datetime | None = None) -> GeneratedRecord:
        """Produce one record: sample, hash, and stamp it."""
        data = self.sample()
        return GeneratedRecord(
            data=data,
            identifier=self.hasher.compute(data),
            timestamp=utc_timestamp(now),
        )
