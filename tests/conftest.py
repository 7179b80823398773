"""Test configuration and fixtures."""

import asyncio
from typing import Callable
from typing import List
from typing import Optional

import httpx
import pytest

from hoodie.client import HoodieClient
from hoodie.events import EventBus
from hoodie.extensions import ExtensionRegistry
from hoodie.http import HoodieHTTPClient
from hoodie.models import HoodieConfig
from hoodie.monitor import ConnectionMonitor

BASE_URL = "https://x.test"


class FakeBackend:
    """Programmable stand-in for a Hoodie server, used as an httpx MockTransport handler."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.cancelled = 0
        self.gate: Optional[asyncio.Event] = None
        self.reply(200, json={"ok": True})

    def reply(self, status_code: int = 200, **kwargs) -> None:
        """Answer every following request with this response."""
        self._respond = lambda request: httpx.Response(status_code, **kwargs)

    def go_offline(self) -> None:
        """Refuse every following connection."""
        def respond(request):
            raise httpx.ConnectError("Connection refused", request=request)

        self._respond = respond

    def time_out(self) -> None:
        def respond(request):
            raise httpx.ReadTimeout("timed out", request=request)

        self._respond = respond

    def hold(self) -> asyncio.Event:
        """Keep requests waiting until the returned event is set."""
        self.gate = asyncio.Event()
        return self.gate

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.gate is not None:
            try:
                await self.gate.wait()
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        return self._respond(request)


class EventRecorder:
    """Collects events triggered on a bus."""

    def __init__(self, bus: EventBus, *events: str) -> None:
        self.events: List[str] = []
        for event in events:
            bus.on(event, lambda *args, event=event: self.events.append(event))


@pytest.fixture
def backend():
    """Fake Hoodie server fixture."""
    return FakeBackend()


@pytest.fixture
def transport(backend):
    """httpx transport routed to the fake server."""
    return httpx.MockTransport(backend)


@pytest.fixture
def hoodie_config():
    """Client configuration fixture."""
    return HoodieConfig(base_url=BASE_URL, timeout=5.0)


@pytest.fixture
async def http_client(hoodie_config, transport):
    """HTTP gateway fixture."""
    async with HoodieHTTPClient(hoodie_config, transport=transport) as client:
        yield client


@pytest.fixture
def bus():
    """Event bus fixture."""
    return EventBus()


@pytest.fixture
async def monitor(http_client, bus):
    """Connection monitor fixture, stopped on teardown."""
    monitor = ConnectionMonitor(http_client, bus)
    yield monitor
    monitor.stop()


@pytest.fixture
def registry():
    """Empty extension registry, so tests never see class-wide registrations."""
    return ExtensionRegistry()


@pytest.fixture
async def client(transport, registry):
    """Hoodie client fixture, disposed on teardown."""
    client = HoodieClient(BASE_URL, transport=transport, extensions=registry)
    yield client
    await client.dispose()


@pytest.fixture
def record_events():
    """Factory attaching an EventRecorder to a bus."""
    return EventRecorder


@pytest.fixture
def wait_until():
    """Poll a condition on the running loop until it holds."""
    async def wait(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)

    return wait
