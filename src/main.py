"""
Production FastAPI Application

HTTP API plus the expiry sweep and payout settlement loops.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.settlement.driving_adapter.scheduler.payout_settlement_job import (
    start_payout_settlement,
)
from src.service.ticketing.driving_adapter.scheduler.expiry_sweep_job import start_expiry_sweep


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Ticket Sales] Starting up...')

    tracing = TracingConfig(service_name='ticket-sales')
    tracing.setup()
    Logger.base.info(
        f'📊 [Ticket Sales] Tracing configured (export={"on" if tracing.exporting else "off"})'
    )

    # Wire dependency injection for all modules
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Ticket Sales] Dependency injection wired')

    database = container.database()
    engine = database.get_engine()
    tracing.instrument_sqlalchemy(engine=engine)
    await create_db_and_tables(engine)
    Logger.base.info('🗄️  [Ticket Sales] Database engine ready, tables ensured')

    async with anyio.create_task_group() as tg:
        if settings.SCHEDULER_ENABLED:
            tg.start_soon(start_expiry_sweep)
            tg.start_soon(start_payout_settlement)
            Logger.base.info('⏰ [Ticket Sales] Expiry sweep and payout settlement scheduled')
        else:
            Logger.base.info('⏭️  [Ticket Sales] Scheduler disabled (SCHEDULER_ENABLED=false)')

        Logger.base.info('✅ [Ticket Sales] Ready to serve requests')

        yield

        Logger.base.info('🛑 [Ticket Sales] Shutting down...')
        tg.cancel_scope.cancel()

    await database.dispose()
    Logger.base.info('🗄️  [Ticket Sales] Database engine disposed')

    tracing.shutdown()
    Logger.base.info('📊 [Ticket Sales] Tracing shutdown complete')

    container.unwire()

    Logger.base.info('👋 [Ticket Sales] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
