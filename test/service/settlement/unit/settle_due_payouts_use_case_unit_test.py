"""
Unit tests for SettleDuePayoutsUseCase

Test Focus:
1. Each due payout is settled independently; one failure never blocks the next
2. Transfers carry the idempotency key PAYOUT-<order_id>
3. Failures park the payout in error with a readable message
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import PaymentGatewayError
from src.service.settlement.app.command.settle_due_payouts_use_case import (
    SettleDuePayoutsUseCase,
)
from src.service.settlement.domain.entity.payout_entity import Payout
from src.service.settlement.domain.enum.payout_status import PayoutStatus
from src.service.settlement.domain.value_object.transfer import TransferReceipt


NOW = datetime(2025, 1, 20, 6, 0, tzinfo=timezone.utc)


def _due_payout(order_id: str, producer_id: int, amount: int) -> Payout:
    return Payout.create(
        producer_id=producer_id,
        order_id=order_id,
        payment_id=f'pay-{order_id}',
        amount=amount,
        holdback=timedelta(days=7),
        now=NOW - timedelta(days=8),
    )


@pytest.fixture
def mock_uow() -> AsyncMock:
    uow = AsyncMock()
    uow.payout_repo = AsyncMock()
    uow.payout_repo.save_transition = AsyncMock(return_value=True)
    return uow


@pytest.fixture
def mock_account_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_payment_account_id = AsyncMock(return_value='acc-7')
    return repo


@pytest.fixture
def mock_transfer_gateway() -> AsyncMock:
    gateway = AsyncMock()
    gateway.create_transfer = AsyncMock(return_value=TransferReceipt(id='tr-1'))
    return gateway


@pytest.fixture
def use_case(mock_uow, mock_account_repo, mock_transfer_gateway) -> SettleDuePayoutsUseCase:
    return SettleDuePayoutsUseCase(
        uow=mock_uow,
        producer_account_query_repo=mock_account_repo,
        transfer_gateway=mock_transfer_gateway,
    )


class TestSettleDuePayouts:
    @pytest.mark.asyncio
    async def test_nothing_due(self, use_case, mock_uow, mock_transfer_gateway) -> None:
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[])

        report = await use_case.execute(now=NOW)

        assert report.attempted == 0
        mock_transfer_gateway.create_transfer.assert_not_called()

    @pytest.mark.asyncio
    async def test_transfer_request(self, use_case, mock_uow, mock_transfer_gateway) -> None:
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[_due_payout('o-1', 7, 22500)])

        report = await use_case.execute(now=NOW)

        request = mock_transfer_gateway.create_transfer.await_args.kwargs['request']
        assert request.receiver_account_id == 'acc-7'
        assert request.amount == 22500
        assert request.currency == 'BRL'
        assert request.idempotency_key == 'PAYOUT-o-1'
        assert [p.transfer_id for p in report.paid] == ['tr-1']
        saved = mock_uow.payout_repo.save_transition.await_args.kwargs['payout']
        assert saved.status == PayoutStatus.PAID

    @pytest.mark.asyncio
    async def test_one_failure_does_not_block_the_next(
        self, use_case, mock_uow, mock_transfer_gateway
    ) -> None:
        """
        Given: Two due payouts P1 and P2
        When: The transfer for P1 fails and the transfer for P2 succeeds
        Then: P1 is stored as error with the processor message, P2 as paid
        """
        p1 = _due_payout('o-1', 7, 10000)
        p2 = _due_payout('o-2', 7, 20000)
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[p1, p2])
        mock_transfer_gateway.create_transfer = AsyncMock(
            side_effect=[
                PaymentGatewayError(
                    'Payment processor call POST /v1/transfers failed: HTTP 400',
                    response_status=400,
                    body='{"message":"insufficient balance"}',
                ),
                TransferReceipt(id='tr-2'),
            ]
        )

        report = await use_case.execute(now=NOW)

        assert [p.order_id for p in report.failed] == ['o-1']
        assert report.failed[0].status == PayoutStatus.ERROR
        assert 'insufficient balance' in report.failed[0].error_message
        assert [p.order_id for p in report.paid] == ['o-2']
        assert report.paid[0].transfer_id == 'tr-2'
        assert mock_uow.commit.await_count == 2

    @pytest.mark.asyncio
    async def test_producer_without_account(
        self, use_case, mock_uow, mock_account_repo, mock_transfer_gateway
    ) -> None:
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[_due_payout('o-1', 9, 5000)])
        mock_account_repo.get_payment_account_id = AsyncMock(return_value=None)

        report = await use_case.execute(now=NOW)

        assert report.failed[0].error_message == 'Producer has no payment account'
        mock_transfer_gateway.create_transfer.assert_not_called()

    @pytest.mark.asyncio
    async def test_payout_changed_concurrently_is_skipped(
        self, use_case, mock_uow
    ) -> None:
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[_due_payout('o-1', 7, 5000)])
        mock_uow.payout_repo.save_transition = AsyncMock(return_value=False)

        report = await use_case.execute(now=NOW)

        assert report.attempted == 0

    @pytest.mark.asyncio
    async def test_status_write_failure_does_not_block_the_next(
        self, use_case, mock_uow, mock_transfer_gateway
    ) -> None:
        """
        Given: Two due payouts P1 and P2, both transfers succeed
        When: Saving P1's new status raises a database error
        Then: P2 is still transferred and saved; P1 is reported unsaved
        """
        p1 = _due_payout('o-1', 7, 10000)
        p2 = _due_payout('o-2', 8, 20000)
        mock_uow.payout_repo.list_due = AsyncMock(return_value=[p1, p2])
        mock_uow.payout_repo.save_transition = AsyncMock(
            side_effect=[RuntimeError('db down'), True]
        )
        mock_transfer_gateway.create_transfer = AsyncMock(
            side_effect=[TransferReceipt(id='tr-1'), TransferReceipt(id='tr-2')]
        )

        report = await use_case.execute(now=NOW)

        assert mock_transfer_gateway.create_transfer.await_count == 2
        assert [p.order_id for p in report.unsaved] == ['o-1']
        assert report.unsaved[0].transfer_id == 'tr-1'
        assert [p.order_id for p in report.paid] == ['o-2']
        assert report.attempted == 2
