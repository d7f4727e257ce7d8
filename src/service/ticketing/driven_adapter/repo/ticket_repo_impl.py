"""
Ticket Repository Implementation

Status writes are single conditional UPDATE ... RETURNING statements, so a
ticket raced by two writers (reservation confirm vs. expiry sweep) is moved by
exactly one of them.
"""

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


_TICKET = TicketModel.__table__


class TicketRepoImpl(ITicketRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Ticket:
        return Ticket(
            id=row['id'],
            user_id=row['user_id'],
            event_id=row['event_id'],
            order_id=row['order_id'],
            fare_class=FareClass(row['fare_class']),
            unit_price=row['unit_price'],
            status=TicketStatus(row['status']),
            payment_id=row['payment_id'],
            expires_at=row['expires_at'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    @staticmethod
    def _entity_to_row(ticket: Ticket) -> dict[str, Any]:
        return {
            'id': ticket.id,
            'user_id': ticket.user_id,
            'event_id': ticket.event_id,
            'order_id': ticket.order_id,
            'payment_id': ticket.payment_id,
            'fare_class': ticket.fare_class.value,
            'unit_price': ticket.unit_price,
            'status': ticket.status.value,
            'expires_at': ticket.expires_at,
            'created_at': ticket.created_at,
            'updated_at': ticket.updated_at,
        }

    async def _fetch(self, *criteria: Any) -> List[Ticket]:
        result = await self.session.execute(
            select(_TICKET).where(*criteria).order_by(_TICKET.c.created_at, _TICKET.c.id)
        )
        return [self._row_to_entity(row) for row in result.mappings().all()]

    @Logger.io
    async def add_many(self, *, tickets: Sequence[Ticket]) -> None:
        if not tickets:
            return
        await self.session.execute(insert(_TICKET), [self._entity_to_row(t) for t in tickets])

    @Logger.io
    async def get_by_order_id(self, *, order_id: str) -> List[Ticket]:
        return await self._fetch(_TICKET.c.order_id == order_id)

    @Logger.io
    async def get_by_payment_id(self, *, payment_id: str) -> List[Ticket]:
        return await self._fetch(_TICKET.c.payment_id == payment_id)

    @Logger.io
    async def list_expired_pending(self, *, now: datetime) -> List[Ticket]:
        return await self._fetch(
            _TICKET.c.status == TicketStatus.PENDING.value,
            _TICKET.c.expires_at < now,
        )

    @Logger.io
    async def confirm_order(
        self, *, order_id: str, payment_id: str, now: datetime
    ) -> List[Ticket]:
        result = await self.session.execute(
            update(_TICKET)
            .where(
                _TICKET.c.order_id == order_id,
                _TICKET.c.status == TicketStatus.PENDING.value,
            )
            .values(
                status=TicketStatus.PAID.value,
                payment_id=payment_id,
                expires_at=None,
                updated_at=now,
            )
            .returning(*_TICKET.c)
        )
        return [self._row_to_entity(row) for row in result.mappings().all()]

    @Logger.io
    async def update_status(
        self,
        *,
        ticket_ids: Sequence[UUID],
        from_statuses: Sequence[TicketStatus],
        to_status: TicketStatus,
        now: datetime,
        expired_before: Optional[datetime] = None,
    ) -> List[Ticket]:
        if not ticket_ids:
            return []

        criteria = [
            _TICKET.c.id.in_(list(ticket_ids)),
            _TICKET.c.status.in_([s.value for s in from_statuses]),
        ]
        if expired_before is not None:
            criteria.append(_TICKET.c.expires_at < expired_before)

        result = await self.session.execute(
            update(_TICKET)
            .where(*criteria)
            .values(status=to_status.value, expires_at=None, updated_at=now)
            .returning(*_TICKET.c)
        )
        return [self._row_to_entity(row) for row in result.mappings().all()]
