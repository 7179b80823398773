"""Utility helpers for the Hoodie SDK."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Generator
from typing import Optional

PENDING = "pending"
RESOLVED = "resolved"
REJECTED = "rejected"
CANCELLED = "cancelled"


class PendingRequest:
    """Awaitable handle for an in-flight request.

    The handle owns the task that runs the whole pipeline (transport call plus
    error normalization), so ``cancel()`` reaches the transport call no matter
    how many steps are layered on top of it.

    Must be created while an event loop is running.
    """

    def __init__(self, operation: Awaitable[Any], name: Optional[str] = None) -> None:
        """Start the operation.

        Args:
            operation: Coroutine or future to run
            name: Optional task name used in debug output
        """
        self._task: asyncio.Future = asyncio.ensure_future(operation)
        if name and isinstance(self._task, asyncio.Task):
            self._task.set_name(name)

    def __await__(self) -> Generator[Any, None, Any]:
        return self._task.__await__()

    def __repr__(self) -> str:
        return f"<PendingRequest state={self.state}>"

    @property
    def state(self) -> str:
        """One of ``pending``, ``resolved``, ``rejected`` or ``cancelled``."""
        if not self._task.done():
            return PENDING
        if self._task.cancelled():
            return CANCELLED
        if self._task.exception() is not None:
            return REJECTED
        return RESOLVED

    def cancel(self) -> bool:
        """Cancel the request, including the underlying transport call.

        Returns:
            False if the request had already finished
        """
        return self._task.cancel()

    # XHR-style name
    abort = cancel

    def done(self) -> bool:
        return self._task.done()

    def cancelled(self) -> bool:
        return self._task.cancelled()

    def result(self) -> Any:
        return self._task.result()

    def exception(self) -> Optional[BaseException]:
        return self._task.exception()

    def add_done_callback(self, callback: Callable[[PendingRequest], Any]) -> None:
        """Call ``callback(self)`` once the request has finished."""
        self._task.add_done_callback(lambda _task: callback(self))


def configure_logging(level: str) -> None:
    """Set the level of the ``hoodie`` logger namespace."""
    logging.getLogger("hoodie").setLevel(level)


def is_absolute_url(path: str) -> bool:
    """True if ``path`` carries its own scheme (``http://``, ``https://``)."""
    return path.startswith("http")


def resolve_url(base_url: str, path: str) -> str:
    """Prefix relative paths with ``base_url``; leave absolute URLs alone.

    Args:
        base_url: Base URL without trailing slash
        path: Relative path or absolute URL

    Returns:
        Request URL
    """
    if is_absolute_url(path):
        return path
    return f"{base_url}{path}"
