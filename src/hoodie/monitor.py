"""
Connection health monitoring for the Hoodie SDK.

The monitor probes the server with ``GET /`` in an endless loop:

- every 30 seconds while the server is reachable,
- every 3 seconds once a probe has failed.

Going offline sets ``online = False`` and triggers ``disconnected``; the next
successful probe sets ``online = True`` and triggers ``reconnected``. Each
transition is announced once, however many probes agree with it afterwards.
"""

import asyncio
import logging
from typing import Optional

from .events import EventBus
from .http import HoodieHTTPClient
from .models import DEGRADED_INTERVAL, HEALTHY_INTERVAL
from .utils import PendingRequest

logger = logging.getLogger(__name__)

DISCONNECTED = "disconnected"
RECONNECTED = "reconnected"


class ConnectionMonitor:
    """Online/offline state machine driven by periodic probes."""

    def __init__(
        self,
        http: HoodieHTTPClient,
        events: EventBus,
        healthy_interval: float = HEALTHY_INTERVAL,
        degraded_interval: float = DEGRADED_INTERVAL,
    ):
        """Initialize connection monitor.

        Args:
            http: Gateway used to send probes
            events: Bus on which transitions are announced
            healthy_interval: Seconds between probes while online
            degraded_interval: Seconds between probes while offline
        """
        self._http = http
        self._events = events
        self.healthy_interval = healthy_interval
        self.degraded_interval = degraded_interval

        self._online = True
        self._interval = healthy_interval
        self._pending: Optional[PendingRequest] = None
        self._timer: Optional[asyncio.Task] = None
        self._timer_delay: Optional[float] = None
        self._stopped = False

    @property
    def online(self) -> bool:
        return self._online

    @property
    def interval(self) -> float:
        """Delay before the next probe, in seconds."""
        return self._interval

    @property
    def next_check_delay(self) -> Optional[float]:
        """Delay the armed timer was scheduled with, or None if no timer is armed."""
        if self._timer is None or self._timer.done():
            return None
        return self._timer_delay

    def check_connection(self) -> PendingRequest:
        """Probe the server now.

        While a probe is in flight, the same probe is returned instead of
        starting another one.

        Returns:
            Probe that resolves to None when the server is reachable and raises
            the request's ``HoodieRequestError`` when it is not
        """
        if self._pending is not None and not self._pending.done():
            return self._pending

        self._pending = PendingRequest(self._probe(), name="hoodie-connection-check")
        self._pending.add_done_callback(self._rearm_if_cancelled)
        return self._pending

    def start(self) -> PendingRequest:
        """Start polling, probing immediately."""
        self._stopped = False
        return self._poll()

    def stop(self) -> None:
        """Stop polling and cancel any probe in flight."""
        self._stopped = True
        self._cancel_timer()
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _probe(self) -> None:
        try:
            await self._http.request("GET", "/")
        except Exception:
            self._handle_error()
            raise
        self._handle_success()

    def _handle_success(self) -> None:
        self._interval = self.healthy_interval
        if not self._online:
            self._online = True
            logger.info(f"Reconnected to Hoodie server at {self._http.base_url}")
            self._events.trigger(RECONNECTED)

        self._schedule_next()

    def _handle_error(self) -> None:
        self._interval = self.degraded_interval
        if self._online:
            self._online = False
            logger.warning(f"Lost connection to Hoodie server at {self._http.base_url}")
            self._events.trigger(DISCONNECTED)

        self._schedule_next()

    def _rearm_if_cancelled(self, check: PendingRequest) -> None:
        # a cancelled probe is not a health outcome, but polling must go on;
        # probes dropped by stop() belong to the previous run
        if check.cancelled() and check is self._pending:
            logger.debug("Connection check cancelled")
            self._schedule_next()

    def _schedule_next(self) -> None:
        if self._stopped:
            return

        self._cancel_timer()
        self._timer_delay = self._interval
        self._timer = asyncio.ensure_future(self._wait_and_check(self._interval))
        logger.debug(f"Next connection check in {self._interval}s")

    async def _wait_and_check(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self._poll()

    def _poll(self) -> PendingRequest:
        check = self.check_connection()
        check.add_done_callback(_consume_outcome)
        return check

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self._timer_delay = None


def _consume_outcome(check: PendingRequest) -> None:
    # nobody awaits scheduled probes; the failure is already reflected in `online`
    if not check.cancelled():
        check.exception()
