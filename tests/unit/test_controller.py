"""Unit tests for the generation controller."""
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from fleetgen.controller import GenerationController, GenerationState
from fleetgen.exceptions import GeneratorStartError
from fleetgen.generators.identity import IdentityHasher
from fleetgen.generators.vehicle_gen import VehicleRecordFactory
from fleetgen.models import PowerSource, VehicleData, VehicleType
from fleetgen.publishers.fanout import EventPublisher
from fleetgen.publishers.view import GENERATOR_STATUS, VEHICLE_GENERATED
from tests.conftest import TEST_PERIOD_SECONDS
from tests.unit.mocks import BlockingBusPublisher, FailingBusPublisher


def generator_threads():
    return [t for t in threading.enumerate() if t.name == "fleetgen-generator" and t.is_alive()]


def vehicle_from_envelope(envelope):
    data = envelope["data"]
    return VehicleData(
        vehicle_type=VehicleType(data["vehicleType"]),
        power_source=PowerSource(data["powerSource"]),
        horsepower=data["horsepower"],
        model_year=data["modelYear"],
        top_speed=data["topSpeed"],
    )


class TestGenerationState:
    """Test the GenerationState class."""

    def test_initial_state(self):
        state = GenerationState()
        assert state.read() == (False, 0)
        assert state.cancellation is None

    def test_begin_and_end_keep_handle_in_sync(self):
        state = GenerationState()
        token = MagicMock()

        state.begin(token)
        assert state.running is True
        assert state.cancellation is token

        state.end()
        assert state.running is False
        assert state.cancellation is None

    def test_increment(self):
        state = GenerationState()
        assert state.increment() == 1
        assert state.increment() == 2
        assert state.read() == (False, 2)


class TestStartStop:
    """Test Start/Stop transitions."""

    def test_start_from_stopped(self, controller):
        result = controller.start()

        assert result.code == 200
        assert result.message == "Generator started"
        assert controller.status().is_generating is True
        assert controller.state.cancellation is not None

    def test_stop_from_running(self, controller):
        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 3)
        result = controller.stop()

        count = controller.status().generated_count
        assert result.code == 200
        assert result.message == f"Generator stopped. total={count}"
        assert controller.status().is_generating is False
        assert controller.state.cancellation is None
        assert generator_threads() == []

    def test_redundant_start_reports_count(self, controller):
        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 2)

        result = controller.start()

        assert result.code == 200
        assert result.message.startswith("Generator already running. total=")
        assert len(generator_threads()) == 1

    def test_redundant_stop_is_not_an_error(self, controller):
        for _ in range(3):
            result = controller.stop()
            assert result.code == 200
            assert result.message == "Generator already stopped"
            assert generator_threads() == []

    def test_repeated_start_runs_a_single_loop(self, controller, bus):
        for _ in range(5):
            controller.start()
        time.sleep(0.2)
        controller.stop()

        # A single loop at 20ms produces about 10 records in 200ms
        count = controller.status().generated_count
        assert 1 <= count <= 0.2 / TEST_PERIOD_SECONDS + 3
        assert len(bus.messages) == count

    def test_concurrent_starts_spawn_one_loop(self, controller):
        barrier = threading.Barrier(8)
        results = []
        results_lock = threading.Lock()

        def call_start():
            barrier.wait()
            result = controller.start()
            with results_lock:
                results.append(result.message)

        callers = [threading.Thread(target=call_start) for _ in range(8)]
        for t in callers:
            t.start()
        for t in callers:
            t.join(timeout=2)

        assert results.count("Generator started") == 1
        assert len(generator_threads()) == 1

    def test_period_must_be_positive(self, publisher):
        with pytest.raises(ValueError):
            GenerationController(
                state=GenerationState(),
                factory=VehicleRecordFactory(),
                publisher=publisher,
                period_seconds=0,
            )

    def test_start_failure_rolls_back_state(self, controller):
        broken_thread = MagicMock()
        broken_thread.return_value.start.side_effect = RuntimeError("can't start new thread")

        with patch("fleetgen.controller.threading.Thread", broken_thread):
            with pytest.raises(GeneratorStartError):
                controller.start()

        assert controller.status().is_generating is False
        assert controller.state.cancellation is None


class TestGenerationLoop:
    """Test tick production and the stop boundary."""

    def test_generates_valid_records(self, controller, bus):
        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 8)
        controller.stop()

        hasher = IdentityHasher()
        assert controller.status().generated_count >= 3
        for envelope in bus.envelopes:
            data = envelope["data"]
            assert 75 <= data["horsepower"] <= 300
            assert 1980 <= data["modelYear"] <= 2025
            assert 120 <= data["topSpeed"] <= 320
            assert envelope["identifier"]
            assert envelope["identifier"] == hasher.compute(vehicle_from_envelope(envelope))
            assert envelope["aggregateType"] == "Vehicle"
            assert envelope["eventType"] == "Generated"

    def test_no_record_after_stop(self, controller, bus, view):
        subscription = view.subscribe([VEHICLE_GENERATED])
        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 4)
        controller.stop()

        count = controller.status().generated_count
        published = len(bus.messages)
        viewed = len(subscription.drain())

        time.sleep(TEST_PERIOD_SECONDS * 5)

        assert len(bus.messages) == published == count
        assert subscription.drain() == []
        assert viewed == count
        assert controller.status().generated_count == count

    def test_count_is_monotonic_across_cycles(self, controller, bus):
        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 4)
        controller.stop()
        first = controller.status().generated_count

        time.sleep(TEST_PERIOD_SECONDS * 2)
        assert controller.status().generated_count == first

        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 4)
        controller.stop()
        second = controller.status().generated_count

        assert second >= first
        assert second == len(bus.messages)

    def test_status_notifications_on_every_call(self, controller, view):
        subscription = view.subscribe([GENERATOR_STATUS])

        controller.start()
        controller.start()
        controller.stop()
        controller.stop()

        events = subscription.drain()
        assert [e.payload["isGenerating"] for e in events] == [True, True, False, False]
        assert [e.payload["status"] for e in events] == ["RUNNING", "RUNNING", "STOPPED", "STOPPED"]

    def test_publish_failure_does_not_stop_loop(self, view):
        bus = FailingBusPublisher()
        errors = []
        publisher = EventPublisher(bus, view, error_sink=lambda ch, err, payload: errors.append(ch))
        controller = GenerationController(
            state=GenerationState(),
            factory=VehicleRecordFactory(),
            publisher=publisher,
            period_seconds=TEST_PERIOD_SECONDS,
        )

        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 6)
        controller.stop()

        count = controller.status().generated_count
        assert count >= 2
        assert bus.attempts == count
        assert errors == ["bus"] * count
        assert len(view.recent()) == count

    def test_start_waits_for_loop_left_by_timed_out_stop(self, view):
        bus = BlockingBusPublisher()
        controller = GenerationController(
            state=GenerationState(),
            factory=VehicleRecordFactory(seed=5),
            publisher=EventPublisher(bus, view),
            period_seconds=TEST_PERIOD_SECONDS,
            stop_timeout=0.05,
        )

        try:
            controller.start()
            assert bus.entered.wait(timeout=1)

            # The in-flight tick is stuck in publish, so the join times out
            stopped = controller.stop()
            assert stopped.message.startswith("Generator stopped. total=")
            stalled = controller._stopping
            assert stalled is not None and stalled.is_alive()

            refused = controller.start()
            assert refused.code == 409
            assert refused.message.startswith("Generator still stopping. total=")
            assert controller.status().is_generating is False
            assert generator_threads() == [stalled]
        finally:
            bus.release.set()

        stalled.join(timeout=1)
        assert not stalled.is_alive()

        assert controller.start().message == "Generator started"
        assert len(generator_threads()) == 1
        controller.stop()
        assert generator_threads() == []

    def test_factory_failure_skips_tick(self, publisher, bus):
        factory = VehicleRecordFactory(seed=3)
        real_create = factory.create
        calls = {"n": 0}

        def flaky_create(now=None):
            calls["n"] += 1
            if calls["n"] % 2:
                raise RuntimeError("sampling failed")
            return real_create(now)

        factory.create = flaky_create
        controller = GenerationController(
            state=GenerationState(),
            factory=factory,
            publisher=publisher,
            period_seconds=TEST_PERIOD_SECONDS,
        )

        controller.start()
        time.sleep(TEST_PERIOD_SECONDS * 8)
        controller.stop()

        assert calls["n"] >= 4
        assert controller.status().generated_count == len(bus.messages)
        assert 1 <= len(bus.messages) < calls["n"]

    def test_status_has_no_side_effects(self, controller, view):
        subscription = view.subscribe()
        before = controller.status()
        after = controller.status()

        assert before == after
        assert before.status_label == "STOPPED"
        assert subscription.drain() == []
