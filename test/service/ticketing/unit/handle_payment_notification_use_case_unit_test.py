"""
Unit tests for HandlePaymentNotificationUseCase

Test Focus:
1. Every notification ends in exactly one outcome; nothing escapes as an exception
2. Approved payments confirm held tickets, clear the cart and queue one payout
3. Redelivered notifications are recognised by payment id and change nothing
"""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import PaymentGatewayError
from src.service.ticketing.app.command.handle_payment_notification_use_case import (
    HandlePaymentNotificationUseCase,
)
from src.service.ticketing.app.dto.payment_notification import WebhookOutcome
from src.service.ticketing.app.service.ticket_ledger import TicketLedger
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.payment import (
    LineItem,
    PaymentDetails,
    PaymentMetadata,
    PaymentStatus,
)


ORDER_ID = 'order-1'
NOTIFICATION = {'type': 'payment', 'data': {'id': 555}}


def _payment(status: PaymentStatus = PaymentStatus.APPROVED, **metadata) -> PaymentDetails:
    fields = {
        'order_id': ORDER_ID,
        'user_id': 2,
        'producer_id': 7,
        'marketplace_fee': 2500,
        'line_items': [LineItem(event_id=1, fare_class='full', quantity=2, unit_price=10000)],
    }
    return PaymentDetails(
        id='555',
        status=status,
        transaction_amount=25000,
        external_reference=ORDER_ID,
        metadata=PaymentMetadata(**{**fields, **metadata}),
    )


@pytest.fixture
def mock_payment_gateway() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def mock_notification_sender() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def use_case(mock_uow, mock_payment_gateway, mock_notification_sender):
    return HandlePaymentNotificationUseCase(
        uow=mock_uow,
        ticket_ledger=TicketLedger(),
        payment_gateway=mock_payment_gateway,
        notification_sender=mock_notification_sender,
    )


class TestNotificationTriage:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'payload',
        [None, 'not-a-dict', {'type': 'payment'}, {'type': 'payment', 'data': {'id': ''}}],
    )
    async def test_malformed_payload_acknowledged(
        self, use_case, mock_payment_gateway, payload
    ) -> None:
        outcome = await use_case.execute(payload=payload)

        assert outcome == WebhookOutcome.MALFORMED
        mock_payment_gateway.get_payment.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_payment_topic_ignored(self, use_case, mock_payment_gateway) -> None:
        outcome = await use_case.execute(payload={'type': 'merchant_order', 'data': {'id': '1'}})

        assert outcome == WebhookOutcome.IGNORED
        mock_payment_gateway.get_payment.assert_not_called()

    @pytest.mark.asyncio
    async def test_donation_ignored(self, use_case, mock_uow, mock_payment_gateway) -> None:
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment(kind='donation'))

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.IGNORED
        mock_uow.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_payment_fetched_by_notified_id(self, use_case, mock_payment_gateway) -> None:
        mock_payment_gateway.get_payment = AsyncMock(
            return_value=_payment(status=PaymentStatus.IN_PROCESS)
        )

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.PENDING
        mock_payment_gateway.get_payment.assert_awaited_once_with(payment_id='555')

    @pytest.mark.asyncio
    async def test_processor_failure_acknowledged_as_failed(
        self, use_case, mock_payment_gateway
    ) -> None:
        mock_payment_gateway.get_payment = AsyncMock(
            side_effect=PaymentGatewayError('Payment processor call failed', response_status=500)
        )

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.FAILED


class TestApprovedPayment:
    @pytest.mark.asyncio
    async def test_confirms_held_tickets_and_queues_payout(
        self,
        use_case,
        mock_uow,
        mock_payment_gateway,
        mock_notification_sender,
        make_ticket,
        now,
    ) -> None:
        """
        Given: Order with two held tickets
        When: The processor reports the payment approved
        Then:
          - Both tickets are paid in one unit of work
          - The buyer's cart is cleared
          - One payout of amount minus marketplace fee is scheduled after the holdback
          - One ticket e-mail per ticket is sent after commit
        """
        # Arrange
        paid = [
            make_ticket(status=TicketStatus.PAID, payment_id='555'),
            make_ticket(status=TicketStatus.PAID, payment_id='555'),
        ]
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(return_value=paid)

        # Act
        outcome = await use_case.execute(payload=NOTIFICATION, now=now)

        # Assert
        assert outcome == WebhookOutcome.CONFIRMED
        mock_uow.ticket_repo.confirm_order.assert_awaited_once_with(
            order_id=ORDER_ID, payment_id='555', now=now
        )
        mock_uow.cart_repo.delete_by_user_id.assert_awaited_once_with(user_id=2)

        payout = mock_uow.payout_repo.add_if_absent.await_args.kwargs['payout']
        assert payout.order_id == ORDER_ID
        assert payout.producer_id == 7
        assert payout.amount == 22500
        assert payout.release_date == now + timedelta(days=7)

        mock_uow.commit.assert_awaited_once()
        assert mock_notification_sender.send_ticket.await_count == 2

    @pytest.mark.asyncio
    async def test_redelivery_is_duplicate(
        self, use_case, mock_uow, mock_payment_gateway, mock_notification_sender, make_ticket
    ) -> None:
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(
            return_value=[make_ticket(status=TicketStatus.PAID, payment_id='555')]
        )

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.DUPLICATE
        mock_uow.payout_repo.add_if_absent.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_notification_sender.send_ticket.assert_not_called()

    @pytest.mark.asyncio
    async def test_lapsed_holds_fall_back_to_issuing_paid_tickets(
        self, use_case, mock_uow, mock_payment_gateway, event, now
    ) -> None:
        """
        Given: The holds of the order were already expired by the sweep
        When: The approved payment arrives
        Then: Paid tickets are issued from the payment's line items, taking stock again
        """
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(return_value=[])
        mock_uow.event_inventory_repo.try_decrement = AsyncMock(return_value=event)

        outcome = await use_case.execute(payload=NOTIFICATION, now=now)

        assert outcome == WebhookOutcome.CONFIRMED
        issued = mock_uow.ticket_repo.add_many.await_args.kwargs['tickets']
        assert len(issued) == 2
        assert {t.status for t in issued} == {TicketStatus.PAID}
        mock_uow.payout_repo.add_if_absent.assert_awaited_once()
        mock_uow.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lapsed_holds_already_issued_by_concurrent_delivery(
        self, use_case, mock_uow, mock_payment_gateway, mock_notification_sender
    ) -> None:
        """
        Given: The holds lapsed and another delivery of the same payment already queued the payout
        When: This delivery reaches the fallback path
        Then: It is a duplicate; no stock is taken and no tickets are issued
        """
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(return_value=[])
        mock_uow.payout_repo.add_if_absent = AsyncMock(return_value=False)

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.DUPLICATE
        mock_uow.event_inventory_repo.try_decrement.assert_not_called()
        mock_uow.ticket_repo.add_many.assert_not_called()
        mock_uow.commit.assert_not_called()
        mock_notification_sender.send_ticket.assert_not_called()

    @pytest.mark.asyncio
    async def test_lapsed_holds_sold_out_fails_without_commit(
        self, use_case, mock_uow, mock_payment_gateway, event
    ) -> None:
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(return_value=[])
        mock_uow.event_inventory_repo.try_decrement = AsyncMock(return_value=None)
        mock_uow.event_inventory_repo.get_by_id = AsyncMock(return_value=event)

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.FAILED
        mock_uow.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_notification_failure_keeps_confirmation(
        self,
        use_case,
        mock_uow,
        mock_payment_gateway,
        mock_notification_sender,
        make_ticket,
    ) -> None:
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment())
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(
            return_value=[make_ticket(status=TicketStatus.PAID, payment_id='555')]
        )
        mock_notification_sender.send_ticket = AsyncMock(side_effect=RuntimeError('smtp down'))

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.CONFIRMED
        mock_uow.commit.assert_awaited_once()


class TestPayoutAmount:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ('marketplace_fee', 'expected_amount'),
        [
            (0, 25000),  # fee waived at checkout
            (None, 22500),  # no fee in metadata: current rate applies
            (4000, 21000),
        ],
    )
    async def test_payout_is_amount_minus_marketplace_fee(
        self,
        use_case,
        mock_uow,
        mock_payment_gateway,
        make_ticket,
        marketplace_fee,
        expected_amount,
    ) -> None:
        mock_payment_gateway.get_payment = AsyncMock(
            return_value=_payment(marketplace_fee=marketplace_fee)
        )
        mock_uow.ticket_repo.get_by_payment_id = AsyncMock(return_value=[])
        mock_uow.ticket_repo.confirm_order = AsyncMock(
            return_value=[make_ticket(status=TicketStatus.PAID, payment_id='555')]
        )

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.CONFIRMED
        payout = mock_uow.payout_repo.add_if_absent.await_args.kwargs['payout']
        assert payout.amount == expected_amount


class TestRefusedPayment:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'status', [PaymentStatus.REJECTED, PaymentStatus.CANCELLED, PaymentStatus.FAILED]
    )
    async def test_refusal_releases_holds(
        self, use_case, mock_uow, mock_payment_gateway, make_ticket, status
    ) -> None:
        pending = make_ticket()
        mock_payment_gateway.get_payment = AsyncMock(return_value=_payment(status=status))
        mock_uow.ticket_repo.get_by_order_id = AsyncMock(return_value=[pending])
        mock_uow.ticket_repo.update_status = AsyncMock(return_value=[pending])

        outcome = await use_case.execute(payload=NOTIFICATION)

        assert outcome == WebhookOutcome.REFUSED
        assert (
            mock_uow.ticket_repo.update_status.await_args.kwargs['to_status']
            == TicketStatus.REFUSED
        )
        mock_uow.event_inventory_repo.increment.assert_awaited_once_with(
            event_id=1, full=1, half=0
        )
        mock_uow.commit.assert_awaited_once()
