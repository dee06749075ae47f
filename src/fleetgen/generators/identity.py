"""Deterministic content identifiers for generated vehicles."""
import hashlib

from fleetgen.models import VehicleData

SEPARATOR = "|"


class IdentityHasher:
    """Derives a SHA-256 identifier from the five sampled vehicle fields.

    Fields are joined in a fixed order (type, power source, horsepower, model
    year, top speed) so the same values always hash to the same identifier and
    downstream consumers can deduplicate on it.
    """

    algorithm = "sha256"

    @staticmethod
    def canonical_string(data: VehicleData) -> str:
        return SEPARATOR.join([
            data.vehicle_type.value,
            data.power_source.value,
            str(data.horsepower),
            str(data.model_year),
            str(data.top_speed),
        ])

    def compute(self, data: VehicleData) -> str:
        """Return the lowercase hex digest for the given vehicle data."""
        canonical = self.canonical_string(data)
        return hashlib.new(self.algorithm, canonical.encode("utf-8")).hexdigest()
