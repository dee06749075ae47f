# fleetgen - synthetic fleet vehicle generator
from fleetgen.controller import GenerationController, GenerationState
from fleetgen.generators import IdentityHasher, VehicleRecordFactory
from fleetgen.publishers import EventPublisher, ViewUpdateChannel
from fleetgen.service import GeneratorService
from fleetgen.status import StatusQuery

__all__ = [
    "GenerationController",
    "GenerationState",
    "IdentityHasher",
    "VehicleRecordFactory",
    "EventPublisher",
    "ViewUpdateChannel",
    "GeneratorService",
    "StatusQuery",
]
