"""Read-only access to the generation state."""
from fleetgen.models import StatusSnapshot


class StatusQuery:
    """Snapshot accessor shared by the control API and the broadcast path."""

    def __init__(self, state):
        """
        Args:
            state: GenerationState to read
        """
        self._state = state

    def snapshot(self) -> StatusSnapshot:
        running, generated_count = self._state.read()
        return StatusSnapshot.of(running, generated_count)

    __call__ = snapshot
