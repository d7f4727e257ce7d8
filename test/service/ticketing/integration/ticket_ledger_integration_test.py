"""
Ticket ledger against a real database

Test Focus:
1. Concurrent reservations never oversell a fare class
2. Every counter decrement is matched by exactly one ticket row
3. Lapsed holds are reclaimed exactly once
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from src.platform.exception.exceptions import InsufficientStockError, NotFoundError
from src.service.ticketing.app.command.expire_tickets_use_case import ExpireTicketsUseCase
from src.service.ticketing.app.command.reserve_tickets_use_case import ReserveTicketsUseCase
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.enum.ticket_status import TicketStatus


async def _tickets_of(uow_factory, order_id: str):
    uow = uow_factory()
    async with uow:
        return await uow.ticket_repo.get_by_order_id(order_id=order_id)


def _reserve_use_case(uow_factory) -> ReserveTicketsUseCase:
    return ReserveTicketsUseCase(uow=uow_factory(), ticket_ledger=TicketLedger())


class TestConcurrentReservation:
    @pytest.mark.asyncio
    async def test_last_tickets_go_to_exactly_two_buyers(
        self, uow_factory, create_event, get_event
    ) -> None:
        """
        Given: An event with 2 full-price tickets left
        When: Three buyers reserve one full-price ticket at the same time
        Then: Two reservations succeed, the third is rejected and the counter ends at 0
        """
        event = await create_event(full_count=2)

        results = await asyncio.gather(
            *(
                _reserve_use_case(uow_factory).execute(
                    user_id=user_id, event_id=event.id, fare_class=FareClass.FULL, quantity=1
                )
                for user_id in (11, 12, 13)
            ),
            return_exceptions=True,
        )

        reserved = [r for r in results if isinstance(r, list)]
        rejected = [r for r in results if isinstance(r, InsufficientStockError)]
        assert len(reserved) == 2
        assert len(rejected) == 1
        assert (await get_event(event.id)).full_count == 0

    @pytest.mark.asyncio
    async def test_counter_and_rows_move_together(
        self, uow_factory, create_event, get_event
    ) -> None:
        event = await create_event(full_count=10, half_count=5)

        tickets = await _reserve_use_case(uow_factory).execute(
            user_id=2, event_id=event.id, fare_class=FareClass.HALF, quantity=3
        )

        stored = await _tickets_of(uow_factory, tickets[0].order_id)
        assert len(stored) == 3
        assert {t.status for t in stored} == {TicketStatus.PENDING}
        assert {t.unit_price for t in stored} == {5000}
        after = await get_event(event.id)
        assert after.half_count == 2
        assert after.full_count == 10

    @pytest.mark.asyncio
    async def test_oversized_request_leaves_inventory_untouched(
        self, uow_factory, create_event, get_event
    ) -> None:
        event = await create_event(half_count=2)

        with pytest.raises(InsufficientStockError):
            await _reserve_use_case(uow_factory).execute(
                user_id=2, event_id=event.id, fare_class=FareClass.HALF, quantity=3
            )

        assert (await get_event(event.id)).half_count == 2

    @pytest.mark.asyncio
    async def test_unknown_event(self, uow_factory, database) -> None:
        with pytest.raises(NotFoundError):
            await _reserve_use_case(uow_factory).execute(
                user_id=2, event_id=999, fare_class=FareClass.FULL, quantity=1
            )


class TestHoldExpiry:
    @pytest.mark.asyncio
    async def test_lapsed_holds_are_reclaimed_once(
        self, uow_factory, create_event, get_event
    ) -> None:
        """
        Given: Two orders holding 2 full and 1 half ticket
        When: The sweep runs after the hold deadline, then runs again
        Then: All holds expire, the counters are restored, and the second run is a no-op
        """
        event = await create_event(full_count=10, half_count=5)
        full = await _reserve_use_case(uow_factory).execute(
            user_id=2, event_id=event.id, fare_class=FareClass.FULL, quantity=2
        )
        await _reserve_use_case(uow_factory).execute(
            user_id=3, event_id=event.id, fare_class=FareClass.HALF, quantity=1
        )
        later = datetime.now(timezone.utc) + timedelta(hours=1)
        use_case = ExpireTicketsUseCase(uow=uow_factory(), ticket_ledger=TicketLedger())

        first = await use_case.execute(now=later)
        second = await use_case.execute(now=later)

        assert first.total == 3
        assert second.total == 0
        after = await get_event(event.id)
        assert (after.full_count, after.half_count) == (10, 5)
        expired = await _tickets_of(uow_factory, full[0].order_id)
        assert {t.status for t in expired} == {TicketStatus.EXPIRED}
        assert all(t.expires_at is None for t in expired)

    @pytest.mark.asyncio
    async def test_live_holds_are_kept(self, uow_factory, create_event, get_event) -> None:
        event = await create_event(full_count=10)
        await _reserve_use_case(uow_factory).execute(
            user_id=2, event_id=event.id, fare_class=FareClass.FULL, quantity=2
        )
        use_case = ExpireTicketsUseCase(uow=uow_factory(), ticket_ledger=TicketLedger())

        restore = await use_case.execute(now=datetime.now(timezone.utc))

        assert restore.is_empty
        assert (await get_event(event.id)).full_count == 8


class TestCapacity:
    @pytest.mark.asyncio
    async def test_available_plus_live_tickets_is_constant(
        self, uow_factory, create_event, get_event
    ) -> None:
        event = await create_event(full_count=6)
        paid_order = await _reserve_use_case(uow_factory).execute(
            user_id=2, event_id=event.id, fare_class=FareClass.FULL, quantity=2
        )
        lapsed_order = await _reserve_use_case(uow_factory).execute(
            user_id=3, event_id=event.id, fare_class=FareClass.FULL, quantity=3
        )
        ledger = TicketLedger()

        uow = uow_factory()
        async with uow:
            await ledger.confirm_paid(uow, order_id=paid_order[0].order_id, payment_id='pay-1')
            await uow.commit()
        later = datetime.now(timezone.utc) + timedelta(hours=1)
        await ExpireTicketsUseCase(uow=uow_factory(), ticket_ledger=ledger).execute(now=later)

        live = [
            t
            for order in (paid_order, lapsed_order)
            for t in await _tickets_of(uow_factory, order[0].order_id)
            if t.status in (TicketStatus.PENDING, TicketStatus.PAID)
        ]
        assert len(live) == 2
        assert (await get_event(event.id)).full_count + len(live) == 6
