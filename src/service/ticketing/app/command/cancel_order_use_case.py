from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class CancelOrderUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, ticket_ledger: TicketLedger) -> None:
        self.uow = uow
        self.ticket_ledger = ticket_ledger

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        ticket_ledger: TicketLedger = Depends(Provide[Container.ticket_ledger]),
    ) -> Self:
        return cls(uow=uow, ticket_ledger=ticket_ledger)

    @Logger.io
    async def execute(self, *, order_id: str, user_id: int) -> List[Ticket]:
        async with self.uow:
            tickets = [
                ticket
                for ticket in await self.uow.ticket_repo.get_by_order_id(order_id=order_id)
                if ticket.user_id == user_id
            ]
            if not tickets:
                raise NotFoundError('Order not found')

            pending = [ticket for ticket in tickets if ticket.status == TicketStatus.PENDING]
            if not pending:
                raise DomainError('Order has no pending tickets to cancel')

            cancelled = await self.ticket_ledger.cancel(self.uow, tickets=pending)
            await self.uow.commit()

        Logger.base.info(f'❎ [CANCEL] Order {order_id}: {len(cancelled)} ticket(s) cancelled')
        return cancelled
