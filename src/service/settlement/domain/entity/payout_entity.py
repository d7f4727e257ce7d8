from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.settlement.domain.enum.payout_status import PayoutStatus


def _validate_amount(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value < 0:
        raise ValueError('Payout amount cannot be negative')


@attrs.define
class Payout:
    """Net proceeds of one order owed to the event's producer."""

    id: UUID
    producer_id: int
    order_id: str
    payment_id: str
    amount: int = attrs.field(validator=_validate_amount)
    release_date: datetime
    status: PayoutStatus = PayoutStatus.PENDING
    transfer_id: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        producer_id: int,
        order_id: str,
        payment_id: str,
        amount: int,
        holdback: timedelta,
        now: Optional[datetime] = None,
    ) -> 'Payout':
        now = now or datetime.now(timezone.utc)
        return cls(
            id=uuid7(),
            producer_id=producer_id,
            order_id=order_id,
            payment_id=payment_id,
            amount=amount,
            release_date=now + holdback,
            created_at=now,
            updated_at=now,
        )

    def is_due(self, *, now: datetime) -> bool:
        return self.status == PayoutStatus.PENDING and now >= self.release_date

    def _require_pending(self, action: str) -> None:
        if self.status != PayoutStatus.PENDING:
            raise DomainError(f'Cannot {action} a {self.status} payout')

    @Logger.io
    def mark_paid(self, *, transfer_id: str, now: Optional[datetime] = None) -> 'Payout':
        self._require_pending('pay')
        return attrs.evolve(
            self,
            status=PayoutStatus.PAID,
            transfer_id=transfer_id,
            updated_at=now or datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_error(self, *, message: str, now: Optional[datetime] = None) -> 'Payout':
        self._require_pending('fail')
        return attrs.evolve(
            self,
            status=PayoutStatus.ERROR,
            error_message=message,
            updated_at=now or datetime.now(timezone.utc),
        )

    @Logger.io
    def mark_refunded(self, *, now: Optional[datetime] = None) -> 'Payout':
        self._require_pending('refund')
        return attrs.evolve(
            self, status=PayoutStatus.REFUNDED, updated_at=now or datetime.now(timezone.utc)
        )
