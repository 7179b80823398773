"""Hoodie Python SDK - Main client implementation.

One ``HoodieClient`` represents one configured connection to a Hoodie server:
- Requests with uniform, structured error values
- Continuous connection monitoring with ``disconnected``/``reconnected`` events
- Feature modules mounted by name as extensions
- A shared event bus for the client and its extensions
"""

import logging
from typing import Any, Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from .env_config import load_config_from_env
from .errors import HoodieConfigurationError, HoodieExtensionError, HoodieRequestError
from .events import EventBus
from .extensions import ExtensionFactory, ExtensionRegistry
from .http import HoodieHTTPClient
from .models import HoodieConfig
from .monitor import ConnectionMonitor
from .remote import RemoteStore
from .utils import PendingRequest, configure_logging

logger = logging.getLogger(__name__)

DISPOSE = "dispose"


class HoodieClient(EventBus):
    """Main Hoodie SDK client.

    Example:
        ```python
        from hoodie import HoodieClient

        HoodieClient.register("magic1", Magic1)

        async with HoodieClient("https://api.example.com") as hoodie:
            hoodie.on("disconnected", lambda: print("offline"))
            hoodie.extend("magic2", Magic2)

            doc = await hoodie.request("GET", "/user_database/doc_id")
            hoodie.magic1.do_something()
            hoodie.magic2.do_something_else()
        ```
    """

    # Extensions registered before any client exists; mounted by every new client
    registry = ExtensionRegistry()

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        config: Optional[HoodieConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        extensions: Optional[ExtensionRegistry] = None,
        store_factory: Optional[Callable[..., Any]] = None,
    ):
        """Initialize Hoodie client.

        Args:
            base_url: Hoodie server URL, trailing slashes are dropped
                (defaults to ``/_api``)
            config: Complete configuration object; ``base_url`` overrides its URL
            transport: httpx transport used for all requests
            extensions: Registry to mount from (defaults to ``HoodieClient.registry``)
            store_factory: Factory behind ``open()`` (defaults to ``RemoteStore``)

        Raises:
            HoodieConfigurationError: Invalid configuration
            HoodieExtensionError: A registered extension failed to mount
        """
        super().__init__()

        try:
            if config is None:
                config = HoodieConfig(base_url=base_url)
            elif base_url:
                config = config.model_copy()
                config.base_url = base_url
        except ValidationError as e:
            raise HoodieConfigurationError(f"Invalid configuration: {e}") from e

        if config.log_level:
            configure_logging(config.log_level)

        self._config = config
        self.http = HoodieHTTPClient(config, transport=transport)
        self.extensions: Dict[str, Any] = {}

        self._monitor = ConnectionMonitor(
            self.http,
            self,
            healthy_interval=config.healthy_interval,
            degraded_interval=config.degraded_interval,
        )
        self._registry = extensions if extensions is not None else type(self).registry
        self._store_factory = store_factory or RemoteStore
        self._disposed = False

        try:
            self._registry.mount_all(self)
        except HoodieExtensionError:
            # let whatever did mount release its resources
            self.trigger(DISPOSE)
            self.http.close_soon()
            raise

    def __getattr__(self, name: str) -> Any:
        extensions = self.__dict__.get("extensions") or {}
        try:
            return extensions[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__!r} object has no attribute {name!r}"
            ) from None

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(base_url={self.base_url!r}, online={self.online}, "
            f"extensions={list(self.extensions)!r})"
        )

    @classmethod
    def register(cls, name: str, factory: Optional[ExtensionFactory] = None) -> Any:
        """Register an extension for every client created afterwards.

        Works as a decorator when ``factory`` is omitted.
        """
        return cls.registry.register(name, factory)

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def online(self) -> bool:
        """Whether the last connection check reached the server."""
        return self._monitor.online

    @property
    def monitor(self) -> ConnectionMonitor:
        return self._monitor

    def request(self, method: str, path: str, **options: Any) -> PendingRequest:
        """Send a request to the Hoodie server.

        See ``HoodieHTTPClient.request`` for the accepted options.

        Example:
            ```python
            request = hoodie.request("GET", "/user_database/doc_id")
            request.abort()  # cancel if no longer needed
            ```
        """
        return self.http.request(method, path, **options)

    def check_connection(self) -> PendingRequest:
        """Check whether the server is reachable.

        Runs automatically after ``connect()``, every 30 seconds while online
        and every 3 seconds while offline.
        """
        return self._monitor.check_connection()

    def open(self, store_name: str, **options: Any) -> Any:
        """Open a remote store.

        Example:
            ```python
            store = hoodie.open("some_store_name")
            docs = await store.find_all()
            ```
        """
        return self._store_factory(self, name=store_name, **options)

    def extend(self, name: str, factory: ExtensionFactory) -> Any:
        """Mount ``factory(self)`` under ``name`` right away.

        Raises:
            HoodieExtensionError: Invalid name, or the factory raised
        """
        return self._registry.mount(self, name, factory)

    async def connect(self) -> bool:
        """Start connection monitoring and wait for the first check.

        Returns:
            True if the server is reachable; an unreachable server is not an error
        """
        try:
            await self._monitor.start()
        except HoodieRequestError as e:
            logger.warning(f"Hoodie server at {self.base_url} is not reachable: {e}")
            return False

        logger.info(f"Connected to Hoodie server at {self.base_url}")
        return True

    async def dispose(self) -> None:
        """Release the client.

        Triggers ``dispose`` first so extensions can clean up while the client
        is still intact, then stops monitoring and closes the HTTP client.
        """
        if self._disposed:
            return
        self._disposed = True

        self.trigger(DISPOSE)

        self._monitor.stop()
        await self.http.close()
        self.extensions.clear()
        self._event_handlers.clear()
        logger.debug(f"Disposed client for {self.base_url}")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.dispose()


def create_client(
    base_url: Optional[str] = None,
    config: Optional[HoodieConfig] = None,
    **kwargs
) -> HoodieClient:
    """Factory function to create a Hoodie client.

    Without ``base_url`` or ``config``, configuration is read from ``HOODIE_*``
    environment variables (and a ``.env`` file).

    Args:
        base_url: Hoodie server URL
        config: Complete configuration object
        **kwargs: Additional ``HoodieClient`` arguments

    Returns:
        HoodieClient instance
    """
    if base_url is None and config is None:
        config = load_config_from_env()
    return HoodieClient(base_url, config=config, **kwargs)
