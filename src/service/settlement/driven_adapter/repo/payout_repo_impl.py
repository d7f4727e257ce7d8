from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.dialect_insert import dialect_insert
from src.platform.logging.loguru_io import Logger
from src.service.settlement.app.interface.i_payout_repo import IPayoutRepo
from src.service.settlement.domain.entity.payout_entity import Payout
from src.service.settlement.domain.enum.payout_status import PayoutStatus
from src.service.settlement.driven_adapter.model.payout_model import PayoutModel


_PAYOUT = PayoutModel.__table__


class PayoutRepoImpl(IPayoutRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Payout:
        return Payout(
            id=row['id'],
            producer_id=row['producer_id'],
            order_id=row['order_id'],
            payment_id=row['payment_id'],
            amount=row['amount'],
            release_date=row['release_date'],
            status=PayoutStatus(row['status']),
            transfer_id=row['transfer_id'],
            error_message=row['error_message'],
            created_at=row['created_at'],
            updated_at=row['updated_at'],
        )

    @Logger.io
    async def add_if_absent(self, *, payout: Payout) -> bool:
        stmt = dialect_insert(self.session, _PAYOUT).values(  # type: ignore[arg-type]
            id=payout.id,
            producer_id=payout.producer_id,
            order_id=payout.order_id,
            payment_id=payout.payment_id,
            amount=payout.amount,
            release_date=payout.release_date,
            status=payout.status.value,
            transfer_id=payout.transfer_id,
            error_message=payout.error_message,
            created_at=payout.created_at,
            updated_at=payout.updated_at,
        )
        result = await self.session.execute(
            stmt.on_conflict_do_nothing(index_elements=[_PAYOUT.c.order_id]).returning(
                _PAYOUT.c.id
            )
        )
        return result.first() is not None

    @Logger.io
    async def get_by_order_id(self, *, order_id: str) -> Optional[Payout]:
        result = await self.session.execute(select(_PAYOUT).where(_PAYOUT.c.order_id == order_id))
        row = result.mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def list_due(self, *, now: datetime) -> List[Payout]:
        result = await self.session.execute(
            select(_PAYOUT)
            .where(
                _PAYOUT.c.status == PayoutStatus.PENDING.value,
                _PAYOUT.c.release_date <= now,
            )
            .order_by(_PAYOUT.c.release_date, _PAYOUT.c.id)
        )
        return [self._row_to_entity(row) for row in result.mappings().all()]

    @Logger.io
    async def save_transition(self, *, payout: Payout) -> bool:
        result = await self.session.execute(
            update(_PAYOUT)
            .where(
                _PAYOUT.c.id == payout.id,
                _PAYOUT.c.status == PayoutStatus.PENDING.value,
            )
            .values(
                status=payout.status.value,
                transfer_id=payout.transfer_id,
                error_message=payout.error_message,
                updated_at=payout.updated_at,
            )
            .returning(_PAYOUT.c.id)
        )
        return result.first() is not None
