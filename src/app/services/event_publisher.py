"""Event Publisher Interface

Fire-and-forget dispatch of domain events to projection handlers.
"""

from abc import ABC, abstractmethod
from typing import Any


class EventPublisher(ABC):
    @abstractmethod
    async def publish(self, event: Any) -> None:
        """
        Dispatch an event without waiting for its handlers

        Must never raise: handler failures are logged by the implementation.
        """
        pass
