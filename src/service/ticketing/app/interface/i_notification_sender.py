from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.ticket_entity import Ticket


class INotificationSender(ABC):
    @abstractmethod
    async def send_ticket(self, *, ticket: Ticket) -> None:
        """Deliver one confirmed ticket to its owner."""
        pass
