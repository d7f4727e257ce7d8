from datetime import timedelta
from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils.compat import uuid7

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.fare_class import FareClass


class ReserveTicketsUseCase:
    """Hold tickets of one fare class for a user as a new pending order."""

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
    async def execute(
        self, *, user_id: int, event_id: int, fare_class: FareClass, quantity: int
    ) -> List[Ticket]:
        order_id = str(uuid7())
        async with self.uow:
            tickets = await self.ticket_ledger.reserve(
                self.uow,
                user_id=user_id,
                order_id=order_id,
                event_id=event_id,
                fare_class=fare_class,
                quantity=quantity,
                hold_duration=timedelta(minutes=settings.HOLD_DURATION_MINUTES),
            )
            await self.uow.commit()

        Logger.base.info(
            f'🎫 [RESERVE] {quantity} {fare_class} ticket(s) held for user {user_id} '
            f'on event {event_id} (order {order_id})'
        )
        return tickets
