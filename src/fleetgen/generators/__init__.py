"""Record factories and pacing for vehicle generation."""
from fleetgen.generators.base import RecordFactory
from fleetgen.generators.identity import IdentityHasher
from fleetgen.generators.ticker import CancellationToken, PeriodicTicker
from fleetgen.generators.vehicle_gen import VehicleProvider, VehicleRecordFactory

__all__ = [
    "RecordFactory",
    "IdentityHasher",
    "CancellationToken",
    "PeriodicTicker",
    "VehicleProvider",
    "VehicleRecordFactory",
]
