"""VPN address monitoring loop.

Polls an interface source at a fixed cadence and reports the first VPN
candidate that differs from the last reported state.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol

from vpn_ip_tracker.config import Config
from vpn_ip_tracker.detector import ChangeDetector
from vpn_ip_tracker.errors import EnumerationError, ReportError
from vpn_ip_tracker.reporter import Reporter
from vpn_ip_tracker.selector import VpnSelector
from vpn_ip_tracker.snapshot import InterfaceSnapshot
from vpn_ip_tracker.source import InterfaceSource

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0  # seconds


class SnapshotReporter(Protocol):
    """Protocol for the reporter dependency."""

    async def report(self, snapshot: InterfaceSnapshot, config: Config) -> None:
        ...


class LoopState(Enum):
    """Whether a VPN address has been reported yet."""

    IDLE = "idle"
    TRACKING = "tracking"


class CycleResult(Enum):
    """Outcome of a single poll cycle."""

    NO_CANDIDATE = "no_candidate"
    UNCHANGED = "unchanged"
    REPORTED = "reported"
    REPORT_FAILED = "report_failed"
    ENUMERATION_FAILED = "enumeration_failed"


class MonitorLoop:
    """Polls interfaces and reports VPN address changes.

    Each cycle enumerates interfaces, selects VPN candidates and reports the
    first one that differs from the last reported snapshot. At most one
    report is sent per cycle; remaining changed candidates wait for the next
    cycle. State is committed only after the endpoint acknowledged the
    report, so a failed report is retried on the next cycle. There is no
    backoff beyond the poll interval.

    Uses dependency injection for the source and reporter to allow testing
    without real interfaces or network.
    """

    def __init__(
        self,
        source: InterfaceSource,
        reporter: SnapshotReporter,
        config: Config,
        selector: Optional[VpnSelector] = None,
        detector: Optional[ChangeDetector] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        """Initialize monitor loop.

        Args:
            source: Interface enumeration capability.
            reporter: Sends snapshots to the report URL.
            config: Tracker configuration with token and report URL.
            selector: VPN candidate selector. Defaults to the host platform
                naming convention.
            detector: Change detector holding the last reported state.
            poll_interval: Seconds between cycles.
        """
        self._source = source
        self._reporter = reporter
        self._config = config
        self._selector = selector or VpnSelector()
        self._detector = detector or ChangeDetector()
        self._interval = poll_interval
        self._stop_event = asyncio.Event()
        self._running = False
        self._enumeration_failures = 0

    @property
    def detector(self) -> ChangeDetector:
        return self._detector

    @property
    def last_reported(self) -> Optional[InterfaceSnapshot]:
        """Last snapshot acknowledged by the endpoint."""
        return self._detector.last_reported

    @property
    def state(self) -> LoopState:
        if self._detector.last_reported is None:
            return LoopState.IDLE
        return LoopState.TRACKING

    @property
    def is_running(self) -> bool:
        """Whether ``run()`` is active."""
        return self._running

    @property
    def consecutive_enumeration_failures(self) -> int:
        """Enumeration failures since the last successful enumeration."""
        return self._enumeration_failures

    def stop(self) -> None:
        """Request the loop to exit.

        Interrupts the sleep between cycles. Safe to call from a signal
        handler on the event loop thread.
        """
        self._stop_event.set()

    async def run(self) -> None:
        """Run cycles until ``stop()`` is called.

        Raises:
            ConfigInvalidError: If the config is unusable. No cycle runs.
        """
        self._config.validate()

        self._running = True
        logger.info("VPN monitor started")
        try:
            while not self._stop_event.is_set():
                await self.run_cycle()
                await self._sleep()
        finally:
            self._running = False
            logger.info("VPN monitor stopped")

    async def run_cycle(self) -> CycleResult:
        """Perform one enumerate-select-report pass."""
        try:
            records = self._source.list()
        except EnumerationError as e:
            self._enumeration_failures += 1
            logger.warning(
                f"Interface enumeration failed "
                f"({self._enumeration_failures} in a row): {e}"
            )
            return CycleResult.ENUMERATION_FAILED
        self._enumeration_failures = 0

        candidates = self._selector.select(records)
        if not candidates:
            return CycleResult.NO_CANDIDATE

        for candidate in candidates:
            if not self._detector.is_change(candidate):
                continue

            try:
                await self._reporter.report(candidate, self._config)
            except ReportError as e:
                logger.warning(f"Failed to send report for {candidate.name}: {e}")
                return CycleResult.REPORT_FAILED

            self._detector.commit(candidate)
            logger.info(f"Reported VPN address of {candidate.name}")
            logger.debug(f"Reported snapshot: {candidate.to_dict()}")
            return CycleResult.REPORTED

        return CycleResult.UNCHANGED

    async def _sleep(self) -> None:
        """Wait for the poll interval or until stopped."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
        except asyncio.TimeoutError:
            pass


async def run(
    config: Config,
    source: InterfaceSource,
    selector: Optional[VpnSelector] = None,
    stop_event: Optional[asyncio.Event] = None,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    http_session=None,
) -> None:
    """Monitor VPN interfaces until ``stop_event`` is set.

    Args:
        config: Tracker configuration with token and report URL.
        source: Interface enumeration capability.
        selector: VPN candidate selector. Defaults to the host platform.
        stop_event: Cancellation signal. If None, runs until cancelled.
        poll_interval: Seconds between cycles.
        http_session: Optional aiohttp session (for testing).

    Raises:
        ConfigInvalidError: If the config is unusable.
    """
    config.validate()

    async with Reporter(http_session=http_session) as reporter:
        monitor = MonitorLoop(
            source=source,
            reporter=reporter,
            config=config,
            selector=selector,
            poll_interval=poll_interval,
        )
        if stop_event is None:
            await monitor.run()
            return

        watcher = asyncio.create_task(_stop_when_set(stop_event, monitor))
        try:
            await monitor.run()
        finally:
            watcher.cancel()
            try:
                await watcher
            except asyncio.CancelledError:
                pass


async def _stop_when_set(stop_event: asyncio.Event, monitor: MonitorLoop) -> None:
    await stop_event.wait()
    monitor.stop()
