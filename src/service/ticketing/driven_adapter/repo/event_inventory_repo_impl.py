from typing import Any, Mapping, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.driven_adapter.model.event_model import EventModel


_EVENT = EventModel.__table__

_COUNTER_COLUMN = {
    FareClass.FULL: _EVENT.c.full_count,
    FareClass.HALF: _EVENT.c.half_count,
}


class EventInventoryRepoImpl(IEventInventoryRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> EventEntity:
        return EventEntity(
            id=row['id'],
            name=row['name'],
            producer_id=row['producer_id'],
            venue_name=row['venue_name'],
            starts_at=row['starts_at'],
            full_price=row['full_price'],
            half_price=row['half_price'],
            full_count=row['full_count'],
            half_count=row['half_count'],
        )

    @Logger.io
    async def create(self, *, event: EventEntity) -> EventEntity:
        result = await self.session.execute(
            insert(_EVENT)
            .values(
                name=event.name,
                producer_id=event.producer_id,
                venue_name=event.venue_name,
                starts_at=event.starts_at,
                full_price=event.full_price,
                half_price=event.half_price,
                full_count=event.full_count,
                half_count=event.half_count,
            )
            .returning(*_EVENT.c)
        )
        return self._row_to_entity(result.mappings().one())

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[EventEntity]:
        result = await self.session.execute(select(_EVENT).where(_EVENT.c.id == event_id))
        row = result.mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def try_decrement(
        self, *, event_id: int, fare_class: FareClass, quantity: int
    ) -> Optional[EventEntity]:
        counter = _COUNTER_COLUMN[fare_class]
        # Check and decrement in one statement; concurrent writers serialize on the row
        result = await self.session.execute(
            update(_EVENT)
            .where(_EVENT.c.id == event_id, counter >= quantity)
            .values({counter: counter - quantity})
            .returning(*_EVENT.c)
        )
        row = result.mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def increment(self, *, event_id: int, full: int = 0, half: int = 0) -> None:
        if not full and not half:
            return
        await self.session.execute(
            update(_EVENT)
            .where(_EVENT.c.id == event_id)
            .values(
                full_count=_EVENT.c.full_count + full,
                half_count=_EVENT.c.half_count + half,
            )
        )
