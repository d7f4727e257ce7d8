from datetime import datetime, timezone
from typing import Optional

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.value_object.inventory_restore import InventoryRestore


class ExpireTicketsUseCase:
    """
    Reclaim inventory held by pending tickets whose hold deadline has passed.

    All ticket transitions and counter increments of one run commit together;
    any failure rolls the whole run back and the next tick retries it.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, ticket_ledger: TicketLedger) -> None:
        self.uow = uow
        self.ticket_ledger = ticket_ledger

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> InventoryRestore:
        now = now or datetime.now(timezone.utc)

        async with self.uow:
            tickets = await self.uow.ticket_repo.list_expired_pending(now=now)
            if not tickets:
                Logger.base.debug('🧹 [EXPIRY] No lapsed holds')
                return InventoryRestore()

            restore = await self.ticket_ledger.expire(self.uow, tickets=tickets, now=now)
            await self.uow.commit()

        metrics.record_tickets_expired(count=restore.total)
        Logger.base.info(
            f'🧹 [EXPIRY] Expired {restore.total} ticket(s) across {len(restore.counts)} event(s)'
        )
        return restore
