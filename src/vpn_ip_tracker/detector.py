"""Change detection against the last reported snapshot."""

from dataclasses import dataclass
from typing import Optional

from vpn_ip_tracker.snapshot import InterfaceSnapshot


@dataclass
class MonitorState:
    """State carried between poll cycles."""

    last_reported: Optional[InterfaceSnapshot] = None


class ChangeDetector:
    """Decides whether a candidate needs to be reported.

    The detector only moves forward on ``commit()``, which the monitor calls
    after the endpoint acknowledged a report. A failed report leaves the
    state alone so the same change is picked up on the next cycle.
    """

    def __init__(self, state: Optional[MonitorState] = None):
        self._state = state or MonitorState()

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def last_reported(self) -> Optional[InterfaceSnapshot]:
        """Last snapshot acknowledged by the endpoint."""
        return self._state.last_reported

    def is_change(self, candidate: InterfaceSnapshot) -> bool:
        """Check whether ``candidate`` differs from the last reported state."""
        last = self._state.last_reported
        return last is None or candidate != last

    def commit(self, candidate: InterfaceSnapshot) -> None:
        """Record ``candidate`` as reported."""
        self._state.last_reported = candidate
