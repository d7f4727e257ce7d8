from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils.compat import uuid7

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.money import fee_of
from src.service.ticketing.app.dto.checkout_result import CheckoutResult
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.value_object.payment import (
    LineItem,
    PaymentMetadata,
    PreferenceItem,
    PreferenceRequest,
)


class CheckoutCartUseCase:
    """
    Turn the user's cart into held tickets plus a payment preference.

    Flow (one unit of work):
    1. Load the cart and its events; one producer per order
    2. Reserve every cart line (conditional inventory decrement + pending tickets)
    3. Create the payment preference carrying the order metadata
    4. Commit; any failure, including the processor call, releases every hold
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

    async def _load_events(self, event_ids: List[int]) -> Dict[int, EventEntity]:
        events: Dict[int, EventEntity] = {}
        for event_id in event_ids:
            event = await self.uow.event_inventory_repo.get_by_id(event_id=event_id)
            if event is None:
                raise NotFoundError(f'Event {event_id} not found')
            events[event_id] = event
        return events

    @Logger.io
    async def execute(self, *, user_id: int, now: Optional[datetime] = None) -> CheckoutResult:
        now = now or datetime.now(timezone.utc)
        order_id = str(uuid7())
        hold_duration = timedelta(minutes=settings.HOLD_DURATION_MINUTES)

        async with self.uow:
            cart = await self.uow.cart_repo.get_by_user_id(user_id=user_id)
            if cart is None or cart.is_empty:
                raise DomainError('Cart is empty')

            events = await self._load_events(cart.event_ids)
            producer_ids = {event.producer_id for event in events.values()}
            if len(producer_ids) > 1:
                raise DomainError('Cart mixes events from different producers')
            producer_id = producer_ids.pop()

            tickets: List[Ticket] = []
            line_items: List[LineItem] = []
            preference_items: List[PreferenceItem] = []
            for item in cart.items:
                event = events[item.event_id]
                reserved = await self.ticket_ledger.reserve(
                    self.uow,
                    user_id=user_id,
                    order_id=order_id,
                    event_id=item.event_id,
                    fare_class=item.fare_class,
                    quantity=item.quantity,
                    hold_duration=hold_duration,
                    now=now,
                )
                tickets.extend(reserved)
                # Charge the event's current price, not the one cached in the cart
                unit_price = event.price_for(item.fare_class)
                line_items.append(
                    LineItem(
                        event_id=item.event_id,
                        fare_class=item.fare_class,
                        quantity=item.quantity,
                        unit_price=unit_price,
                    )
                )
                preference_items.append(
                    PreferenceItem(
                        title=f'{event.name} ({item.fare_class})',
                        quantity=item.quantity,
                        unit_price=unit_price,
                    )
                )

            total = sum(ticket.unit_price for ticket in tickets)
            marketplace_fee = fee_of(total, settings.MARKETPLACE_FEE_RATE)
            expires_at = now + hold_duration

            preference = await self.payment_gateway.create_preference(
                request=PreferenceRequest(
                    order_id=order_id,
                    items=preference_items,
                    metadata=PaymentMetadata(
                        order_id=order_id,
                        user_id=user_id,
                        producer_id=producer_id,
                        marketplace_fee=marketplace_fee,
                        line_items=line_items,
                    ),
                    expires_at=expires_at,
                )
            )
            await self.uow.commit()

        Logger.base.info(
            f'🛒 [CHECKOUT] Order {order_id}: {len(tickets)} ticket(s) held for user {user_id}, '
            f'total={total} fee={marketplace_fee}'
        )
        return CheckoutResult(
            order_id=order_id,
            checkout_url=preference.checkout_url,
            expires_at=expires_at,
            total=total,
            marketplace_fee=marketplace_fee,
            tickets=tickets,
        )
