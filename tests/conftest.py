"""Test configuration for pytest."""
import pytest

from fleetgen.controller import GenerationController, GenerationState
from fleetgen.generators.vehicle_gen import VehicleRecordFactory
from fleetgen.publishers.fanout import EventPublisher
from fleetgen.publishers.view import ViewUpdateChannel
from tests.unit.mocks import RecordingBusPublisher

# Short tick period keeps timing tests fast
TEST_PERIOD_SECONDS = 0.02


@pytest.fixture
def sample_config():
    """Sample configuration for testing."""
    return {
        "generator": {"period_ms": 20, "seed": 42},
        "bus": {"transport": "none", "topic": "fleet/vehicles/generated"},
        "view": {"buffer_size": 100},
    }


@pytest.fixture
def bus():
    return RecordingBusPublisher()


@pytest.fixture
def view():
    return ViewUpdateChannel(buffer_size=100)


@pytest.fixture
def publisher(bus, view):
    return EventPublisher(bus, view)


@pytest.fixture
def controller(publisher):
    """Controller with a short period; stopped again after the test."""
    ctl = GenerationController(
        state=GenerationState(),
        factory=VehicleRecordFactory(seed=7),
        publisher=publisher,
        period_seconds=TEST_PERIOD_SECONDS,
        stop_timeout=2.0,
    )
    yield ctl
    if ctl.is_running:
        ctl.stop()
