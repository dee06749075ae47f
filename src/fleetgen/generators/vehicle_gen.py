"""Faker-based vehicle record factory."""
from faker import Faker
from faker.providers import BaseProvider

from fleetgen.generators.base import RecordFactory
from fleetgen.generators.identity import IdentityHasher
from fleetgen.models import PowerSource, VehicleData, VehicleType

HORSEPOWER_RANGE = (75, 300)
MODEL_YEAR_RANGE = (1980, 2025)
TOP_SPEED_RANGE = (120, 320)


class VehicleProvider(BaseProvider):
    """Custom Faker provider for vehicle fields.

    Every field is drawn uniformly and independently from its domain; integer
    ranges are inclusive at both ends.
    """

    def vehicle_type(self) -> VehicleType:
        return self.random_element(list(VehicleType))

    def power_source(self) -> PowerSource:
        return self.random_element(list(PowerSource))

    def horsepower(self) -> int:
        return self.random_int(min=HORSEPOWER_RANGE[0], max=HORSEPOWER_RANGE[1])

    def model_year(self) -> int:
        return self.random_int(min=MODEL_YEAR_RANGE[0], max=MODEL_YEAR_RANGE[1])

    def top_speed(self) -> int:
        return self.random_int(min=TOP_SPEED_RANGE[0], max=TOP_SPEED_RANGE[1])


class VehicleRecordFactory(RecordFactory):
    """Record factory using the Faker library."""

    def __init__(
        self,
        locale: str = "en_US",
        seed: int | None = None,
        hasher: IdentityHasher | None = None,
    ):
        """Initialize the vehicle factory.

        Args:
            locale: Faker locale
            seed: Random seed for reproducible data
            hasher: Identifier strategy
        """
        super().__init__(hasher)
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)

        self.fake.add_provider(VehicleProvider)

    def sample(self) -> VehicleData:
        return VehicleData(
            vehicle_type=self.fake.vehicle_type(),
            power_source=self.fake.power_source(),
            horsepower=self.fake.horsepower(),
            model_year=self.fake.model_year(),
            top_speed=self.fake.top_speed(),
        )
