"""Unit tests for status snapshots."""
from fleetgen.controller import GenerationState
from fleetgen.generators.ticker import CancellationToken
from fleetgen.models import StatusSnapshot
from fleetgen.status import StatusQuery


class TestStatusQuery:
    """Test the StatusQuery class."""

    def test_stopped_snapshot(self):
        query = StatusQuery(GenerationState())

        snapshot = query.snapshot()

        assert snapshot == StatusSnapshot(is_generating=False, generated_count=0, status_label="STOPPED")

    def test_running_snapshot(self):
        state = GenerationState()
        state.begin(CancellationToken())
        for _ in range(4):
            state.increment()

        snapshot = StatusQuery(state)()

        assert snapshot.to_dict() == {"isGenerating": True, "generatedCount": 4, "status": "RUNNING"}

    def test_snapshot_does_not_mutate(self):
        state = GenerationState()
        query = StatusQuery(state)

        query.snapshot()
        query.snapshot()

        assert state.read() == (False, 0)
        assert state.cancellation is None
