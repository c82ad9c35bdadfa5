"""In-process Event Publisher

Dispatches domain events to registered async handlers as background tasks.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

from src.app.services.event_publisher import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None]]


class InProcessEventPublisher(EventPublisher):
    """
    Fire-and-forget publisher backed by asyncio tasks

    Events that expose an ordering_key are chained: each one starts only
    after the previous event with the same key was fully handled. Events
    with different keys run concurrently.

    Usage:
        publisher = InProcessEventPublisher()
        publisher.subscribe(EstimateCreated, project_job)
        await publisher.publish(EstimateCreated(...))
        await publisher.drain()  # on shutdown or in tests
    """

    def __init__(self):
        self._handlers: Dict[type, List[EventHandler]] = defaultdict(list)
        self._tasks: Set[asyncio.Task] = set()
        self._tails: Dict[str, asyncio.Task] = {}

    def subscribe(self, event_type: type, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: Any) -> None:
        handlers = list(self._handlers.get(type(event), []))
        if not handlers:
            return

        key = getattr(event, "ordering_key", None)
        previous = self._tails.get(key) if key is not None else None

        task = asyncio.create_task(self._dispatch(previous, handlers, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        if key is not None:
            self._tails[key] = task
            task.add_done_callback(lambda done, key=key: self._release(key, done))

    async def drain(self) -> None:
        """Wait for every in-flight handler to finish"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._tails.get(key) is task:
            del self._tails[key]

    async def _dispatch(
        self, previous: Optional[asyncio.Task], handlers: List[EventHandler], event: Any
    ) -> None:
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        for handler in handlers:
            await self._run(handler, event)

    async def _run(self, handler: EventHandler, event: Any) -> None:
        try:
            await handler(event)
        except Exception as e:
            logger.warning(
                f"Event handler {getattr(handler, '__name__', type(handler).__name__)} "
                f"failed for {type(event).__name__}: {e}"
            )
