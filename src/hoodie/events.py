"""Minimal publish/subscribe event bus shared by a client and its extensions."""

import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Set

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class EventBus:
    """Synchronous event bus.

    Handlers run in registration order inside ``trigger``. A handler that
    returns an awaitable has it scheduled as a task on the running loop.
    A failing handler is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._event_handlers: Dict[str, List[EventHandler]] = {}
        self._handler_tasks: Set[asyncio.Future] = set()

    def on(self, event: str, handler: EventHandler) -> None:
        """Add event handler."""
        if event not in self._event_handlers:
            self._event_handlers[event] = []
        self._event_handlers[event].append(handler)

    def one(self, event: str, handler: EventHandler) -> None:
        """Add event handler that is removed after its first call."""
        def once(*args: Any) -> Any:
            self.off(event, once)
            return handler(*args)

        self.on(event, once)

    def off(self, event: str, handler: Optional[EventHandler] = None) -> None:
        """Remove event handler."""
        if event not in self._event_handlers:
            return

        if handler is None:
            # Remove all handlers for event
            self._event_handlers[event] = []
        elif handler in self._event_handlers[event]:
            self._event_handlers[event].remove(handler)

    def trigger(self, event: str, *args: Any) -> None:
        """Emit event to handlers."""
        # copy: handlers may unsubscribe while we iterate
        for handler in list(self._event_handlers.get(event, [])):
            try:
                result = handler(*args)
            except Exception:
                logger.exception(f"Error in event handler for {event}")
                continue

            if inspect.isawaitable(result):
                self._schedule_handler(event, result)

    def _schedule_handler(self, event: str, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._handler_tasks.add(task)

        def done(finished: asyncio.Future) -> None:
            self._handler_tasks.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                logger.error(
                    f"Error in async event handler for {event}",
                    exc_info=finished.exception(),
                )

        task.add_done_callback(done)
