#!/usr/bin/env python3
"""
Database Seed Script
Populate demo data into the database

Features:
1. Create Tables - create any missing table
2. Create Producer Accounts - payout receiver accounts for the demo producers
3. Create Events - events with full and half fare inventory

Notes:
- Prices are in cents
- Run from the repository root: `python -m script.seed_data`
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from src.platform.config.di import container
from src.platform.database.dialect_insert import dialect_insert
from src.platform.database.orm_db_setting import create_db_and_tables
from src.service.settlement.driven_adapter.model.producer_account_model import (
    ProducerAccountModel,
)
from src.service.ticketing.domain.entity.event_entity import EventEntity


@dataclass
class ProducerConfig:
    producer_id: int
    payment_account_id: str | None


PRODUCERS = [
    ProducerConfig(producer_id=1, payment_account_id='1234567890'),
    # No account: its payouts land in error for manual follow-up
    ProducerConfig(producer_id=2, payment_account_id=None),
]


def _demo_events(now: datetime) -> list[EventEntity]:
    return [
        EventEntity(
            name='Summer Rock Night',
            producer_id=1,
            venue_name='Arena Central',
            starts_at=now + timedelta(days=30),
            full_price=12000,
            half_price=6000,
            full_count=500,
            half_count=100,
        ),
        EventEntity(
            name='Jazz at the Park',
            producer_id=2,
            venue_name='Parque das Flores',
            starts_at=now + timedelta(days=14),
            full_price=8000,
            half_price=4000,
            full_count=200,
            half_count=50,
        ),
    ]


async def _seed_producers() -> None:
    async with container.database().session() as session:
        table = ProducerAccountModel.__table__
        for producer in PRODUCERS:
            stmt = dialect_insert(session, table).values(
                producer_id=producer.producer_id,
                payment_account_id=producer.payment_account_id,
            )
            await session.execute(
                stmt.on_conflict_do_update(
                    index_elements=[table.c.producer_id],
                    set_={'payment_account_id': stmt.excluded.payment_account_id},
                )
            )
        await session.commit()
    print(f'   ✅ {len(PRODUCERS)} producer account(s) upserted')


async def _seed_events() -> None:
    uow = container.unit_of_work()
    async with uow:
        for event in _demo_events(datetime.now(timezone.utc)):
            created = await uow.event_inventory_repo.create(event=event)
            print(
                f"   ✅ Event {created.id} '{created.name}': "
                f'{created.full_count} full + {created.half_count} half'
            )
        await uow.commit()


async def main() -> None:
    print('🌱 Seeding database...')
    await create_db_and_tables()
    await _seed_producers()
    await _seed_events()
    await container.database().dispose()
    print('🎉 Done')


if __name__ == '__main__':
    asyncio.run(main())
