"""Mounting of independently developed modules onto a Hoodie client."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from typing import Callable
from typing import Dict
from typing import Iterator
from typing import Optional

from hoodie.errors import HoodieExtensionError

if TYPE_CHECKING:
    from hoodie.client import HoodieClient

logger = logging.getLogger(__name__)

ExtensionFactory = Callable[["HoodieClient"], Any]


class ExtensionRegistry:
    """Named extension factories waiting to be mounted on clients.

    A factory receives the client and returns the module to expose under its
    name. Modules are expected to talk to each other through the client's
    event bus rather than by holding references to one another.

    Example:
        ```python
        registry = ExtensionRegistry()

        @registry.register("account")
        class Account:
            def __init__(self, hoodie):
                hoodie.on("dispose", self.close)

        client = HoodieClient("https://example.test", extensions=registry)
        client.account
        ```
    """

    def __init__(self) -> None:
        self._factories: Dict[str, ExtensionFactory] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self._factories)

    def __len__(self) -> int:
        return len(self._factories)

    def register(
        self,
        name: str,
        factory: Optional[ExtensionFactory] = None,
    ) -> Any:
        """Record a factory to mount on every client built from this registry.

        Can be used as a decorator when ``factory`` is omitted. Registering a
        name again replaces the earlier factory.

        Args:
            name: Attribute name the module is exposed under
            factory: Callable taking the client and returning the module

        Returns:
            The factory (so the decorator form leaves it unchanged)
        """
        if factory is None:
            def decorator(func: ExtensionFactory) -> ExtensionFactory:
                self.register(name, func)
                return func

            return decorator

        if not callable(factory):
            raise HoodieExtensionError(name, f"Extension factory for {name!r} is not callable")

        self._factories[name] = factory
        return factory

    def unregister(self, name: str) -> None:
        """Forget a pending registration."""
        self._factories.pop(name, None)

    def mount(self, client: HoodieClient, name: str, factory: ExtensionFactory) -> Any:
        """Build ``factory(client)`` now and store it on the client.

        Args:
            client: Client to extend
            name: Attribute name the module is exposed under
            factory: Callable taking the client and returning the module

        Returns:
            The mounted module

        Raises:
            HoodieExtensionError: Invalid name, or the factory raised
        """
        _check_name(client, name)

        try:
            module = factory(client)
        except Exception as e:
            logger.error(f"Failed to mount extension {name!r}: {e}")
            raise HoodieExtensionError(
                name,
                f"Failed to mount extension {name!r}: {e}",
            ) from e

        client.extensions[name] = module
        logger.debug(f"Mounted extension {name!r}")
        return module

    def mount_all(self, client: HoodieClient) -> None:
        """Mount every registered factory, in registration order.

        Stops at the first failing factory and raises its error.
        """
        for name, factory in list(self._factories.items()):
            self.mount(client, name, factory)


def _check_name(client: HoodieClient, name: str) -> None:
    if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
        raise HoodieExtensionError(str(name), f"Invalid extension name: {name!r}")

    if hasattr(type(client), name) or name in vars(client):
        raise HoodieExtensionError(
            name,
            f"Extension name {name!r} clashes with a client attribute",
        )
