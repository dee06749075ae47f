"""Data types shared by the generator, the publishers and the control surface."""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

AGGREGATE_TYPE = "Vehicle"
EVENT_TYPE = "Generated"

STATUS_RUNNING = "RUNNING"
STATUS_STOPPED = "STOPPED"


class VehicleType(Enum):
    """Body style of a generated vehicle."""
    SUV = "SUV"
    PICKUP = "PickUp"
    SEDAN = "Sedan"


class PowerSource(Enum):
    """Drive train energy source."""
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"
    GAS = "Gas"


@dataclass(frozen=True)
class VehicleData:
    """The five sampled fields of a generated vehicle."""
    vehicle_type: VehicleType
    power_source: PowerSource
    horsepower: int
    model_year: int
    top_speed: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "vehicleType": self.vehicle_type.value,
            "powerSource": self.power_source.value,
            "horsepower": self.horsepower,
            "modelYear": self.model_year,
            "topSpeed": self.top_speed,
        }


def utc_timestamp(now: datetime | None = None) -> str:
    """Format a wall-clock instant as ISO-8601 UTC with a trailing ``Z``."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class GeneratedRecord:
    """One vehicle produced by a generation tick, ready to be published."""
    data: VehicleData
    identifier: str
    timestamp: str
    aggregate_type: str = AGGREGATE_TYPE
    event_type: str = EVENT_TYPE

    def to_envelope(self) -> dict[str, Any]:
        """Build the event envelope sent to both output channels."""
        return {
            "aggregateType": self.aggregate_type,
            "eventType": self.event_type,
            "identifier": self.identifier,
            "timestamp": self.timestamp,
            "data": self.data.to_dict(),
        }


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of the generation state."""
    is_generating: bool
    generated_count: int
    status_label: str

    @classmethod
    def of(cls, running: bool, generated_count: int) -> "StatusSnapshot":
        return cls(
            is_generating=running,
            generated_count=generated_count,
            status_label=STATUS_RUNNING if running else STATUS_STOPPED,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "isGenerating": self.is_generating,
            "generatedCount": self.generated_count,
            "status": self.status_label,
        }


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a Start or Stop call."""
    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}
