"""Unit tests for the Faker vehicle factory."""
from datetime import datetime, timezone

from fleetgen.generators.identity import IdentityHasher
from fleetgen.generators.vehicle_gen import VehicleRecordFactory
from fleetgen.models import PowerSource, VehicleType


class TestVehicleRecordFactory:
    """Test the VehicleRecordFactory class."""

    def test_sample_ranges(self):
        factory = VehicleRecordFactory(seed=1)

        for _ in range(500):
            vehicle = factory.sample()
            assert isinstance(vehicle.vehicle_type, VehicleType)
            assert isinstance(vehicle.power_source, PowerSource)
            assert 75 <= vehicle.horsepower <= 300
            assert 1980 <= vehicle.model_year <= 2025
            assert 120 <= vehicle.top_speed <= 320

    def test_all_enum_values_appear(self):
        factory = VehicleRecordFactory(seed=2)
        samples = [factory.sample() for _ in range(300)]

        assert {v.vehicle_type for v in samples} == set(VehicleType)
        assert {v.power_source for v in samples} == set(PowerSource)

    def test_seed_reproducibility(self):
        a = VehicleRecordFactory(seed=42)
        b = VehicleRecordFactory(seed=42)
        assert [a.sample() for _ in range(20)] == [b.sample() for _ in range(20)]

    def test_create_stamps_identifier_and_timestamp(self):
        factory = VehicleRecordFactory(seed=5)
        now = datetime(2024, 3, 1, 12, 30, 0, tzinfo=timezone.utc)

        record = factory.create(now)

        assert record.identifier == IdentityHasher().compute(record.data)
        assert record.timestamp == "2024-03-01T12:30:00.000Z"
        assert record.aggregate_type == "Vehicle"
        assert record.event_type == "Generated"

    def test_envelope_shape(self):
        record = VehicleRecordFactory(seed=6).create()
        envelope = record.to_envelope()

        assert set(envelope) == {"aggregateType", "eventType", "identifier", "timestamp", "data"}
        assert set(envelope["data"]) == {"vehicleType", "powerSource", "horsepower", "modelYear", "topSpeed"}
        assert envelope["data"]["vehicleType"] in {"SUV", "PickUp", "Sedan"}
        assert envelope["data"]["powerSource"] in {"Electric", "Hybrid", "Gas"}
