"""
Test Configuration and Fixtures

This module provides:
- Environment setup before application modules read settings
- A fresh SQLite database (aiosqlite) per integration test
- Unit of work and seeding helpers shared by the service test suites

Architecture:
- Unit tests (test/**/unit/): AsyncMock repositories, no database
- Integration tests (test/**/integration/): real schema on a throwaway SQLite file
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time by src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    default_db = Path(tempfile.gettempdir()) / 'ticket_sales_test_app.db'
    os.environ['DATABASE_URL_ASYNC'] = f'sqlite+aiosqlite:///{default_db}'
    os.environ['DEBUG'] = 'false'
    os.environ['SCHEDULER_ENABLED'] = 'false'
    os.environ['PAYMENT_ACCESS_TOKEN'] = 'TEST-access-token'
    os.environ['PAYMENT_API_BASE_URL'] = 'https://payments.test'
    os.environ.pop('OTEL_EXPORTER_OTLP_ENDPOINT', None)


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402

from src.platform.database.orm_db_setting import (  # noqa: E402
    AsyncEngineManager,
    Database,
    create_db_and_tables,
)
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork  # noqa: E402
from src.service.ticketing.domain.entity.event_entity import EventEntity  # noqa: E402


# =============================================================================
# Pytest Hooks
# =============================================================================
def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        path = str(item.path)
        if '/integration/' in path and not item.get_closest_marker('integration'):
            item.add_marker(pytest.mark.integration)
        elif '/unit/' in path and not item.get_closest_marker('unit'):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Database Fixtures
# =============================================================================
@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f'sqlite+aiosqlite:///{tmp_path / "ticket_sales.db"}'


@pytest.fixture
async def database(database_url: str) -> AsyncGenerator[Database, None]:
    engine_manager = AsyncEngineManager(database_url=database_url)
    await create_db_and_tables(engine_manager.get_engine())
    db = Database(engine_manager=engine_manager)

    yield db

    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> Callable[[], SqlAlchemyUnitOfWork]:
    def _make() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory=database.new_session)

    return _make


@pytest.fixture
def create_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> Callable[..., Awaitable[EventEntity]]:
    async def _create(
        *,
        producer_id: int = 1,
        full_count: int = 10,
        half_count: int = 5,
        full_price: int = 10000,
        half_price: int = 5000,
        starts_at: Optional[datetime] = None,
        name: str = 'Summer Rock Night',
    ) -> EventEntity:
        uow = uow_factory()
        async with uow:
            event = await uow.event_inventory_repo.create(
                event=EventEntity(
                    name=name,
                    producer_id=producer_id,
                    venue_name='Arena Central',
                    starts_at=starts_at or datetime.now(timezone.utc) + timedelta(days=30),
                    full_price=full_price,
                    half_price=half_price,
                    full_count=full_count,
                    half_count=half_count,
                )
            )
            await uow.commit()
        return event

    return _create


@pytest.fixture
def get_event(
    uow_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> Callable[[int], Awaitable[EventEntity]]:
    async def _get(event_id: int) -> EventEntity:
        uow = uow_factory()
        async with uow:
            event = await uow.event_inventory_repo.get_by_id(event_id=event_id)
        assert event is not None
        return event

    return _get
