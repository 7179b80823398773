"""Tests for connection monitoring."""

import asyncio

import pytest

from hoodie.errors import HoodieConnectionError
from hoodie.errors import HoodieHTTPError
from hoodie.events import EventBus
from hoodie.monitor import ConnectionMonitor


class TestTransitions:
    """Test the online/offline state machine."""

    @pytest.mark.asyncio
    async def test_initial_state(self, monitor):
        """Monitors start online with the healthy interval."""
        assert monitor.online is True
        assert monitor.interval == 30.0
        assert monitor.next_check_delay is None

    @pytest.mark.asyncio
    async def test_probe_is_get_root(self, monitor, backend):
        """The probe is a GET of the server root."""
        await monitor.check_connection()

        request = backend.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "https://x.test/"

    @pytest.mark.asyncio
    async def test_success_while_online(self, monitor, bus, record_events):
        """A healthy probe changes nothing and schedules the next one."""
        recorder = record_events(bus, "disconnected", "reconnected")

        assert await monitor.check_connection() is None

        assert monitor.online is True
        assert recorder.events == []
        assert monitor.next_check_delay == 30.0

    @pytest.mark.asyncio
    async def test_failure_goes_offline(self, monitor, backend, bus, record_events):
        """A failed probe while online disconnects once."""
        recorder = record_events(bus, "disconnected", "reconnected")
        backend.go_offline()

        with pytest.raises(HoodieConnectionError):
            await monitor.check_connection()

        assert monitor.online is False
        assert recorder.events == ["disconnected"]
        assert monitor.interval == 3.0
        assert monitor.next_check_delay == 3.0

    @pytest.mark.asyncio
    async def test_error_status_counts_as_failure(self, monitor, backend):
        """Any rejected probe, not only unreachable servers, means offline."""
        backend.reply(503, json={"error": "maintenance"})

        with pytest.raises(HoodieHTTPError):
            await monitor.check_connection()

        assert monitor.online is False

    @pytest.mark.asyncio
    async def test_repeated_failures_emit_once(self, monitor, backend, bus, record_events):
        """Three failed probes in a row announce a single disconnect."""
        recorder = record_events(bus, "disconnected", "reconnected")
        backend.go_offline()

        for _ in range(3):
            with pytest.raises(HoodieConnectionError):
                await monitor.check_connection()
            assert monitor.interval == 3.0
            assert monitor.online is False

        assert recorder.events == ["disconnected"]
        assert len(backend.requests) == 3

    @pytest.mark.asyncio
    async def test_success_while_offline_reconnects(self, monitor, backend, bus, record_events):
        """Recovering restores online, announces it once and slows polling down."""
        recorder = record_events(bus, "disconnected", "reconnected")
        backend.go_offline()
        with pytest.raises(HoodieConnectionError):
            await monitor.check_connection()

        backend.reply(200, json={"ok": True})
        await monitor.check_connection()
        await monitor.check_connection()

        assert monitor.online is True
        assert recorder.events == ["disconnected", "reconnected"]
        assert monitor.interval == 30.0
        assert monitor.next_check_delay == 30.0

    @pytest.mark.asyncio
    async def test_listeners_see_updated_flag_before_scheduling(self, monitor, backend, bus):
        """Transitions update the flag, then emit, then schedule."""
        seen = []
        bus.on("disconnected", lambda: seen.append((monitor.online, monitor.next_check_delay)))
        bus.on("reconnected", lambda: seen.append((monitor.online, monitor.interval)))

        backend.go_offline()
        with pytest.raises(HoodieConnectionError):
            await monitor.check_connection()
        backend.reply(200)
        await monitor.check_connection()

        assert seen == [(False, None), (True, 30.0)]

    @pytest.mark.asyncio
    async def test_custom_intervals(self, http_client, backend, bus):
        """Intervals can be configured per monitor."""
        monitor = ConnectionMonitor(http_client, bus, healthy_interval=10.0, degraded_interval=1.0)
        backend.go_offline()

        try:
            with pytest.raises(HoodieConnectionError):
                await monitor.check_connection()
            assert monitor.interval == 1.0
        finally:
            monitor.stop()


class TestSingleFlight:
    """Only one probe may be in flight."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_probe(self, monitor, backend, wait_until):
        """A second call while pending returns the same probe."""
        gate = backend.hold()

        first = monitor.check_connection()
        second = monitor.check_connection()
        assert first is second

        await wait_until(lambda: backend.requests)
        gate.set()
        await first

        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_rapid_calls(self, monitor, backend):
        """Many synchronous calls still issue one probe."""
        checks = {id(monitor.check_connection()) for _ in range(50)}
        assert len(checks) == 1

        await monitor.check_connection()
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_new_probe_after_completion(self, monitor, backend):
        """Once finished, the next call probes again."""
        first = monitor.check_connection()
        await first
        second = monitor.check_connection()
        await second

        assert first is not second
        assert len(backend.requests) == 2


class TestCancellation:
    """Cancelled probes are not health outcomes but keep the loop alive."""

    @pytest.mark.asyncio
    async def test_cancelled_probe_keeps_state_and_rearms(
        self, monitor, backend, bus, record_events, wait_until
    ):
        """Cancelling the probe neither disconnects nor stalls polling."""
        recorder = record_events(bus, "disconnected", "reconnected")
        backend.hold()
        check = monitor.check_connection()
        await wait_until(lambda: backend.requests)

        check.cancel()
        with pytest.raises(asyncio.CancelledError):
            await check
        await asyncio.sleep(0)

        assert monitor.online is True
        assert recorder.events == []
        assert backend.cancelled == 1
        assert monitor.next_check_delay == 30.0

    @pytest.mark.asyncio
    async def test_cancelled_before_start_rearms(self, monitor, backend):
        """A probe cancelled before it ever ran still re-arms the loop."""
        check = monitor.check_connection()
        check.cancel()

        with pytest.raises(asyncio.CancelledError):
            await check
        await asyncio.sleep(0)

        assert backend.requests == []
        assert monitor.next_check_delay == 30.0

    @pytest.mark.asyncio
    async def test_cancel_while_offline_keeps_degraded_interval(self, monitor, backend, wait_until):
        """Re-arming after cancellation uses the current interval."""
        backend.go_offline()
        with pytest.raises(HoodieConnectionError):
            await monitor.check_connection()

        backend.hold()
        check = monitor.check_connection()
        await wait_until(lambda: len(backend.requests) == 2)
        check.cancel()
        with pytest.raises(asyncio.CancelledError):
            await check
        await asyncio.sleep(0)

        assert monitor.online is False
        assert monitor.next_check_delay == 3.0

    @pytest.mark.asyncio
    async def test_stop_cancels_everything(self, monitor, backend, wait_until):
        """stop() cancels the probe in flight and does not re-arm."""
        backend.hold()
        check = monitor.check_connection()
        await wait_until(lambda: backend.requests)

        monitor.stop()
        with pytest.raises(asyncio.CancelledError):
            await check
        await asyncio.sleep(0)

        assert monitor.next_check_delay is None

    @pytest.mark.asyncio
    async def test_start_after_stop_probes_afresh(self, monitor, backend, bus, record_events, wait_until):
        """A restart does not hand back the probe that stop() cancelled."""
        recorder = record_events(bus, "disconnected", "reconnected")
        gate = backend.hold()
        first = monitor.start()
        await wait_until(lambda: backend.requests)

        monitor.stop()
        gate.set()
        second = monitor.start()

        assert second is not first
        assert await second is None
        await wait_until(first.cancelled)
        assert len(backend.requests) == 2
        assert monitor.online is True
        assert recorder.events == []
        assert monitor.next_check_delay == 30.0


class TestPollingLoop:
    """The monitor keeps probing on its own."""

    @pytest.mark.asyncio
    async def test_loop_follows_server_health(self, http_client, backend, wait_until):
        """Polling detects both outage and recovery without any caller."""
        bus = EventBus()
        events = []
        bus.on("disconnected", lambda: events.append("disconnected"))
        bus.on("reconnected", lambda: events.append("reconnected"))
        monitor = ConnectionMonitor(
            http_client, bus, healthy_interval=0.01, degraded_interval=0.01
        )
        backend.go_offline()

        try:
            monitor.start()
            await wait_until(lambda: len(backend.requests) >= 4)
            assert events == ["disconnected"]
            assert monitor.online is False

            backend.reply(200)
            await wait_until(lambda: monitor.online)
            count = len(backend.requests)
            await wait_until(lambda: len(backend.requests) >= count + 3)
            assert events == ["disconnected", "reconnected"]
        finally:
            monitor.stop()

    @pytest.mark.asyncio
    async def test_start_returns_first_probe(self, monitor, backend):
        """start() probes immediately."""
        await monitor.start()

        assert len(backend.requests) == 1
        assert monitor.next_check_delay == 30.0

    @pytest.mark.asyncio
    async def test_independent_monitors(self, http_client, backend):
        """Monitors do not share state."""
        first = ConnectionMonitor(http_client, EventBus())
        second = ConnectionMonitor(http_client, EventBus())
        backend.go_offline()

        try:
            with pytest.raises(HoodieConnectionError):
                await first.check_connection()

            assert first.online is False
            assert second.online is True
            assert second.interval == 30.0
        finally:
            first.stop()
            second.stop()
