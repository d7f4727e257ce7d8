from datetime import datetime, timedelta, timezone
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.settlement.domain.enum.payout_status import PayoutStatus
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


class RefundOrderUseCase:
    """
    Refund a paid order within the refund window.

    The processor refund runs between two short transactions: the first
    validates the order, the second (after an approved refund) cancels the
    pending payout and marks the tickets refunded. Refunded seats stay off sale.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        ticket_ledger: TicketLedger,
        payment_gateway: IPaymentGateway,
    ) -> None:
        self.uow = uow
        self.ticket_ledger = ticket_ledger
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        ticket_ledger: TicketLedger = Depends(Provide[Container.ticket_ledger]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow=uow, ticket_ledger=ticket_ledger, payment_gateway=payment_gateway)

    async def _owned_tickets(self, *, order_id: str, user_id: int) -> List[Ticket]:
        tickets = [
            ticket
            for ticket in await self.uow.ticket_repo.get_by_order_id(order_id=order_id)
            if ticket.user_id == user_id
        ]
        if not tickets:
            raise NotFoundError('Order not found')
        return tickets

    @Logger.io
    async def execute(
        self, *, order_id: str, user_id: int, now: Optional[datetime] = None
    ) -> List[Ticket]:
        now = now or datetime.now(timezone.utc)

        async with self.uow:
            tickets = await self._owned_tickets(order_id=order_id, user_id=user_id)

        if any(ticket.status != TicketStatus.PAID for ticket in tickets):
            raise DomainError('Only paid orders can be refunded')

        purchased_at = min(ticket.created_at or now for ticket in tickets)
        if now > purchased_at + timedelta(days=settings.REFUND_WINDOW_DAYS):
            raise DomainError(
                f'Refunds are only accepted within {settings.REFUND_WINDOW_DAYS} days of purchase'
            )

        payment_id = tickets[0].payment_id
        if not payment_id:
            raise DomainError('Order has no payment to refund')

        refund = await self.payment_gateway.refund_payment(
            payment_id=payment_id, idempotency_key=f'REFUND-{order_id}'
        )
        if not refund.is_approved:
            raise DomainError(f'Refund was not approved by the processor (status: {refund.status})')

        async with self.uow:
            payout = await self.uow.payout_repo.get_by_order_id(order_id=order_id)
            payout_cancelled = False
            if payout is not None and payout.status == PayoutStatus.PENDING:
                # Guarded on pending: loses to a settlement run that paid it meanwhile
                payout_cancelled = await self.uow.payout_repo.save_transition(
                    payout=payout.mark_refunded(now=now)
                )
            if payout is not None and not payout_cancelled:
                # The buyer already has the money back, so the tickets are refunded anyway
                Logger.base.error(
                    f'❌ [REFUND] Payout {payout.id} of order {order_id} could not be cancelled '
                    f'(read as {payout.status}); producer was paid for a refunded order'
                )

            tickets = await self._owned_tickets(order_id=order_id, user_id=user_id)
            refunded = await self.ticket_ledger.refund(self.uow, tickets=tickets, now=now)
            await self.uow.commit()

        Logger.base.info(
            f'↩️ [REFUND] Order {order_id} refunded (refund {refund.id}), '
            f'{len(refunded)} ticket(s)'
        )
        return refunded
