from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.fare_class import FareClass


class IEventInventoryRepo(ABC):
    """Per-event unsold ticket counters."""

    @abstractmethod
    async def create(self, *, event: EventEntity) -> EventEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        pass

    @abstractmethod
    async def try_decrement(
        self, *, event_id: int, fare_class: FareClass, quantity: int
    ) -> Optional[EventEntity]:
        """
        Conditionally take ``quantity`` tickets off the fare class counter.

        Returns:
            The event after the decrement, or None when the event is missing or
            has fewer than ``quantity`` tickets left (counter untouched)
        """
        pass

    @abstractmethod
    async def increment(self, *, event_id: int, full: int = 0, half: int = 0) -> None:
        pass
