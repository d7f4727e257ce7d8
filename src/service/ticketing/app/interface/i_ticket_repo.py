"""
Ticket Repository Interface

Ticket status writes are guarded: every update names the statuses it may
leave and only the rows still in one of them are touched and returned.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID

from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class ITicketRepo(ABC):
    @abstractmethod
    async def add_many(self, *, tickets: Sequence[Ticket]) -> None:
        pass

    @abstractmethod
    async def get_by_order_id(self, *, order_id: str) -> List[Ticket]:
        pass

    @abstractmethod
    async def get_by_payment_id(self, *, payment_id: str) -> List[Ticket]:
        pass

    @abstractmethod
    async def list_expired_pending(self, *, now: datetime) -> List[Ticket]:
        """Pending tickets whose hold deadline is before ``now``."""
        pass

    @abstractmethod
    async def confirm_order(
        self, *, order_id: str, payment_id: str, now: datetime
    ) -> List[Ticket]:
        """
        Pending tickets of the order -> paid, stamped with ``payment_id``.

        Returns:
            Only the tickets this call moved out of pending
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        *,
        ticket_ids: Sequence[UUID],
        from_statuses: Sequence[TicketStatus],
        to_status: TicketStatus,
        now: datetime,
        expired_before: Optional[datetime] = None,
    ) -> List[Ticket]:
        """
        Move tickets still in ``from_statuses`` to ``to_status`` and clear the hold deadline.

        Args:
            expired_before: When given, only tickets whose hold lapsed before it are touched

        Returns:
            Only the tickets this call actually transitioned
        """
        pass
