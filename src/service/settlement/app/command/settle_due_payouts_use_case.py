from datetime import datetime, timezone
from typing import Optional

from src.platform.config.core_setting import settings
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import CustomBaseError, DomainError, PaymentGatewayError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.settlement.app.interface.i_producer_account_query_repo import (
    IProducerAccountQueryRepo,
)
from src.service.settlement.app.interface.i_transfer_gateway import ITransferGateway
from src.service.settlement.domain.entity.payout_entity import Payout
from src.service.settlement.domain.enum.payout_status import PayoutStatus
from src.service.settlement.domain.value_object.transfer import SettlementReport, TransferRequest


MAX_ERROR_MESSAGE_LENGTH = 1000


def _describe_failure(error: Exception) -> str:
    if isinstance(error, PaymentGatewayError) and error.body:
        message = f'{error.message}: {error.body}'
    elif isinstance(error, CustomBaseError):
        message = error.message
    else:
        message = f'{type(error).__name__}: {error}'
    return message[:MAX_ERROR_MESSAGE_LENGTH]


class SettleDuePayoutsUseCase:
    """
    Transfer every due payout to its producer.

    Payouts are settled one by one, each status write in its own transaction:
    one producer's failure never blocks another's payout. A failed payout is
    parked in ``error`` and left for manual follow-up; the transfer carries the
    idempotency key ``PAYOUT-<order_id>`` so a retried request cannot pay twice.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        producer_account_query_repo: IProducerAccountQueryRepo,
        transfer_gateway: ITransferGateway,
    ) -> None:
        self.uow = uow
        self.producer_account_query_repo = producer_account_query_repo
        self.transfer_gateway = transfer_gateway

    async def _transfer(self, *, payout: Payout, now: datetime) -> Payout:
        account_id = await self.producer_account_query_repo.get_payment_account_id(
            producer_id=payout.producer_id
        )
        if not account_id:
            raise DomainError('Producer has no payment account')

        receipt = await self.transfer_gateway.create_transfer(
            request=TransferRequest(
                receiver_account_id=account_id,
                amount=payout.amount,
                currency=settings.CURRENCY,
                description=f'Payout for order {payout.order_id}',
                idempotency_key=f'PAYOUT-{payout.order_id}',
            )
        )
        return payout.mark_paid(transfer_id=receipt.id, now=now)

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> SettlementReport:
        now = now or datetime.now(timezone.utc)
        report = SettlementReport()

        async with self.uow:
            due = await self.uow.payout_repo.list_due(now=now)

        if not due:
            Logger.base.info('💸 [PAYOUT] No payouts due')
            return report

        for payout in due:
            try:
                settled = await self._transfer(payout=payout, now=now)
            except Exception as e:
                if not isinstance(e, CustomBaseError):
                    Logger.base.opt(exception=e).error(f'❌ [PAYOUT] Unexpected error: {e}')
                settled = payout.mark_error(message=_describe_failure(e), now=now)

            try:
                async with self.uow:
                    saved = await self.uow.payout_repo.save_transition(payout=settled)
                    await self.uow.commit()
            except Exception as e:
                # Stays pending; a retried transfer reuses the idempotency key
                report.unsaved.append(settled)
                metrics.record_payout(result='unsaved')
                Logger.base.opt(exception=e).error(
                    f'❌ [PAYOUT] Could not save payout {payout.id} as {settled.status} '
                    f'(transfer {settled.transfer_id}): {e}'
                )
                continue

            if not saved:
                Logger.base.warning(f'⚠️ [PAYOUT] Payout {payout.id} changed while settling')
                continue

            if settled.status == PayoutStatus.PAID:
                report.paid.append(settled)
                metrics.record_payout(result='paid')
                Logger.base.info(
                    f'💸 [PAYOUT] Order {payout.order_id}: {payout.amount} paid to producer '
                    f'{payout.producer_id} (transfer {settled.transfer_id})'
                )
            else:
                report.failed.append(settled)
                metrics.record_payout(result='error')
                Logger.base.error(
                    f'❌ [PAYOUT] Order {payout.order_id} failed: {settled.error_message}'
                )

        Logger.base.info(
            f'💸 [PAYOUT] Settlement done: {len(report.paid)} paid, {len(report.failed)} failed, '
            f'{len(report.unsaved)} unsaved'
        )
        return report
