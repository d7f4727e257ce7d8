from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from unittest.mock import AsyncMock

import pytest
from uuid_utils.compat import uuid7

from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)
ORDER_ID = '01936d8f-5e70-7000-8000-000000000001'


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def mock_uow() -> AsyncMock:
    uow = AsyncMock()
    uow.ticket_repo = AsyncMock()
    uow.event_inventory_repo = AsyncMock()
    uow.cart_repo = AsyncMock()
    uow.payout_repo = AsyncMock()
    return uow


@pytest.fixture
def event() -> EventEntity:
    return EventEntity(
        id=1,
        name='Summer Rock Night',
        producer_id=7,
        venue_name='Arena Central',
        starts_at=NOW + timedelta(days=30),
        full_price=10000,
        half_price=5000,
        full_count=10,
        half_count=5,
    )


@pytest.fixture
def make_ticket() -> Callable[..., Ticket]:
    def _make(
        *,
        status: TicketStatus = TicketStatus.PENDING,
        user_id: int = 2,
        event_id: int = 1,
        order_id: str = ORDER_ID,
        fare_class: FareClass = FareClass.FULL,
        unit_price: int = 10000,
        payment_id: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        created_at: datetime = NOW - timedelta(hours=1),
    ) -> Ticket:
        if status == TicketStatus.PENDING and expires_at is None:
            expires_at = NOW + timedelta(minutes=30)
        return Ticket(
            id=uuid7(),
            user_id=user_id,
            event_id=event_id,
            order_id=order_id,
            fare_class=fare_class,
            unit_price=unit_price,
            status=status,
            payment_id=payment_id,
            expires_at=expires_at,
            created_at=created_at,
            updated_at=created_at,
        )

    return _make
