"""
Ticket ledger: the only writer of ticket status and event inventory counters.

Every operation runs inside the caller's unit of work, so the caller decides
what commits together. Counter decrements are conditional (never below zero)
and every decrement is matched by one ticket row; every guarded status change
that releases a held or sold ticket returns exactly the rows it moved, and only
those rows are credited back to the counters.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

import attrs

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    DomainError,
    InsufficientStockError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.inventory_restore import InventoryRestore
from src.service.ticketing.domain.value_object.payment import LineItem


@attrs.define
class Confirmation:
    newly_paid: List[Ticket] = attrs.field(factory=list)
    already_paid: List[Ticket] = attrs.field(factory=list)

    @property
    def is_duplicate(self) -> bool:
        return not self.newly_paid and bool(self.already_paid)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TicketLedger:
    async def _take_stock(
        self, uow: AbstractUnitOfWork, *, event_id: int, fare_class: FareClass, quantity: int
    ) -> EventEntity:
        if quantity < 1:
            raise DomainError('quantity must be at least 1')

        event = await uow.event_inventory_repo.try_decrement(
            event_id=event_id, fare_class=fare_class, quantity=quantity
        )
        if event is not None:
            metrics.record_reservation(
                fare_class=fare_class, result='reserved', quantity=quantity
            )
            return event

        existing = await uow.event_inventory_repo.get_by_id(event_id=event_id)
        if existing is None:
            metrics.record_reservation(fare_class=fare_class, result='not_found')
            raise NotFoundError(f'Event {event_id} not found')

        metrics.record_reservation(fare_class=fare_class, result='insufficient_stock')
        raise InsufficientStockError(f'Insufficient stock for {existing.name} ({fare_class})')

    async def _restore(self, uow: AbstractUnitOfWork, restore: InventoryRestore) -> None:
        for event_id, counts in restore.items():
            await uow.event_inventory_repo.increment(
                event_id=event_id, full=counts.full, half=counts.half
            )

    @Logger.io
    async def reserve(
        self,
        uow: AbstractUnitOfWork,
        *,
        user_id: int,
        order_id: str,
        event_id: int,
        fare_class: FareClass,
        quantity: int,
        hold_duration: timedelta,
        now: Optional[datetime] = None,
    ) -> List[Ticket]:
        now = now or _utc_now()
        event = await self._take_stock(
            uow, event_id=event_id, fare_class=fare_class, quantity=quantity
        )
        tickets = [
            Ticket.create_pending(
                user_id=user_id,
                event_id=event_id,
                order_id=order_id,
                fare_class=fare_class,
                unit_price=event.price_for(fare_class),
                hold_duration=hold_duration,
                now=now,
            )
            for _ in range(quantity)
        ]
        await uow.ticket_repo.add_many(tickets=tickets)
        return tickets

    @Logger.io
    async def confirm_paid(
        self,
        uow: AbstractUnitOfWork,
        *,
        order_id: str,
        payment_id: str,
        now: Optional[datetime] = None,
    ) -> Confirmation:
        already_paid = await uow.ticket_repo.get_by_payment_id(payment_id=payment_id)
        if already_paid:
            return Confirmation(already_paid=already_paid)

        newly_paid = await uow.ticket_repo.confirm_order(
            order_id=order_id, payment_id=payment_id, now=now or _utc_now()
        )
        if not newly_paid:
            # A concurrent delivery may have confirmed the order while we waited on the rows
            already_paid = await uow.ticket_repo.get_by_payment_id(payment_id=payment_id)
        return Confirmation(newly_paid=newly_paid, already_paid=already_paid)

    @Logger.io
    async def issue_paid(
        self,
        uow: AbstractUnitOfWork,
        *,
        user_id: int,
        order_id: str,
        payment_id: str,
        line_items: Sequence[LineItem],
        now: Optional[datetime] = None,
    ) -> List[Ticket]:
        """Tickets for an approved payment whose holds are gone; stock is taken again."""
        now = now or _utc_now()
        tickets: List[Ticket] = []
        for item in line_items:
            await self._take_stock(
                uow, event_id=item.event_id, fare_class=item.fare_class, quantity=item.quantity
            )
            tickets.extend(
                Ticket.create_paid(
                    user_id=user_id,
                    event_id=item.event_id,
                    order_id=order_id,
                    fare_class=item.fare_class,
                    unit_price=item.unit_price,
                    payment_id=payment_id,
                    now=now,
                )
                for _ in range(item.quantity)
            )
        await uow.ticket_repo.add_many(tickets=tickets)
        return tickets

    @Logger.io
    async def expire(
        self, uow: AbstractUnitOfWork, *, tickets: Sequence[Ticket], now: datetime
    ) -> InventoryRestore:
        lapsed = [ticket.expire(now=now) for ticket in tickets if ticket.is_hold_lapsed(now=now)]
        moved = await uow.ticket_repo.update_status(
            ticket_ids=[ticket.id for ticket in lapsed],
            from_statuses=[TicketStatus.PENDING],
            to_status=TicketStatus.EXPIRED,
            now=now,
            expired_before=now,
        )
        restore = InventoryRestore.from_rows((t.event_id, t.fare_class) for t in moved)
        await self._restore(uow, restore)
        return restore

    @Logger.io
    async def refuse(
        self, uow: AbstractUnitOfWork, *, order_id: str, now: Optional[datetime] = None
    ) -> InventoryRestore:
        now = now or _utc_now()
        pending = [
            ticket.refuse(now=now)
            for ticket in await uow.ticket_repo.get_by_order_id(order_id=order_id)
            if ticket.status == TicketStatus.PENDING
        ]
        moved = await uow.ticket_repo.update_status(
            ticket_ids=[ticket.id for ticket in pending],
            from_statuses=[TicketStatus.PENDING],
            to_status=TicketStatus.REFUSED,
            now=now,
        )
        restore = InventoryRestore.from_rows((t.event_id, t.fare_class) for t in moved)
        await self._restore(uow, restore)
        return restore

    @Logger.io
    async def cancel(
        self, uow: AbstractUnitOfWork, *, tickets: Sequence[Ticket], now: Optional[datetime] = None
    ) -> List[Ticket]:
        now = now or _utc_now()
        cancelled = [ticket.cancel(now=now) for ticket in tickets]
        moved = await uow.ticket_repo.update_status(
            ticket_ids=[ticket.id for ticket in cancelled],
            from_statuses=[TicketStatus.PENDING, TicketStatus.PAID],
            to_status=TicketStatus.CANCELLED,
            now=now,
        )

        # Seats of an event that already started cannot be sold again
        restore = InventoryRestore()
        for event_id, counts in InventoryRestore.from_rows(
            (t.event_id, t.fare_class) for t in moved
        ).items():
            event = await uow.event_inventory_repo.get_by_id(event_id=event_id)
            if event is not None and not event.has_started(now=now):
                restore.counts[event_id] = counts
        await self._restore(uow, restore)
        return moved

    @Logger.io
    async def refund(
        self, uow: AbstractUnitOfWork, *, tickets: Sequence[Ticket], now: Optional[datetime] = None
    ) -> List[Ticket]:
        now = now or _utc_now()
        refunded = [ticket.refund(now=now) for ticket in tickets]
        # Refunded seats are not put back on sale
        return await uow.ticket_repo.update_status(
            ticket_ids=[ticket.id for ticket in refunded],
            from_statuses=[TicketStatus.PAID],
            to_status=TicketStatus.REFUNDED,
            now=now,
        )
