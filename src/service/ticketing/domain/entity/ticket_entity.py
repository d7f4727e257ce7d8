from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


@attrs.define
class Ticket:
    """
    One admission to one event.

    Lifecycle::

        pending ──> paid ──> refunded
           │          │
           │          └────> cancelled
           ├──> expired / refused / cancelled

    ``expires_at`` (the hold deadline) is set exactly while the ticket is pending.
    """

    id: UUID
    user_id: int
    event_id: int
    order_id: str
    fare_class: FareClass
    unit_price: int
    status: TicketStatus
    payment_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __attrs_post_init__(self) -> None:
        if (self.status == TicketStatus.PENDING) != (self.expires_at is not None):
            raise DomainError(f'Ticket {self.id}: hold deadline must be set only while pending')

    @classmethod
    def create_pending(
        cls,
        *,
        user_id: int,
        event_id: int,
        order_id: str,
        fare_class: FareClass,
        unit_price: int,
        hold_duration: timedelta,
        now: Optional[datetime] = None,
    ) -> 'Ticket':
        now = now or datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            user_id=user_id,
            event_id=event_id,
            order_id=order_id,
            fare_class=fare_class,
            unit_price=unit_price,
            status=TicketStatus.PENDING,
            expires_at=now + hold_duration,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def create_paid(
        cls,
        *,
        user_id: int,
        event_id: int,
        order_id: str,
        fare_class: FareClass,
        unit_price: int,
        payment_id: str,
        now: Optional[datetime] = None,
    ) -> 'Ticket':
        now = now or datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            user_id=user_id,
            event_id=event_id,
            order_id=order_id,
            fare_class=fare_class,
            unit_price=unit_price,
            status=TicketStatus.PAID,
            payment_id=payment_id,
            created_at=now,
            updated_at=now,
        )

    def is_hold_lapsed(self, *, now: datetime) -> bool:
        return (
            self.status == TicketStatus.PENDING
            and self.expires_at is not None
            and self.expires_at < now
        )

    @Logger.io
    def mark_paid(self, *, payment_id: str, now: Optional[datetime] = None) -> 'Ticket':
        if self.status != TicketStatus.PENDING:
            raise DomainError(f'Cannot pay for a {self.status} ticket')
        return attrs.evolve(
            self,
            status=TicketStatus.PAID,
            payment_id=payment_id,
            expires_at=None,
            updated_at=now or datetime.now(timezone.utc),
        )

    @Logger.io
    def expire(self, *, now: datetime) -> 'Ticket':
        if self.status != TicketStatus.PENDING:
            raise DomainError(f'Cannot expire a {self.status} ticket')
        if not self.is_hold_lapsed(now=now):
            raise DomainError('Ticket hold has not lapsed yet')
        return attrs.evolve(self, status=TicketStatus.EXPIRED, expires_at=None, updated_at=now)

    @Logger.io
    def refuse(self, *, now: Optional[datetime] = None) -> 'Ticket':
        if self.status != TicketStatus.PENDING:
            raise DomainError(f'Cannot refuse a {self.status} ticket')
        return attrs.evolve(
            self,
            status=TicketStatus.REFUSED,
            expires_at=None,
            updated_at=now or datetime.now(timezone.utc),
        )

    @Logger.io
    def cancel(self, *, now: Optional[datetime] = None) -> 'Ticket':
        if self.status not in (TicketStatus.PENDING, TicketStatus.PAID):
            raise DomainError(f'Cannot cancel a {self.status} ticket')
        return attrs.evolve(
            self,
            status=TicketStatus.CANCELLED,
            expires_at=None,
            updated_at=now or datetime.now(timezone.utc),
        )

    @Logger.io
    def refund(self, *, now: Optional[datetime] = None) -> 'Ticket':
        if self.status != TicketStatus.PAID:
            raise DomainError(f'Cannot refund a {self.status} ticket')
        return attrs.evolve(
            self, status=TicketStatus.REFUNDED, updated_at=now or datetime.now(timezone.utc)
        )
