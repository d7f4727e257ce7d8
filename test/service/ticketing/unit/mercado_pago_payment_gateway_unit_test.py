from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.domain.value_object.payment import (
    LineItem,
    PaymentMetadata,
    PaymentStatus,
    PreferenceItem,
    PreferenceRequest,
)
from src.service.ticketing.driven_adapter.gateway.mercado_pago_payment_gateway_impl import (
    MercadoPagoPaymentGatewayImpl,
)


@pytest.fixture
def mock_client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def gateway(mock_client: AsyncMock) -> MercadoPagoPaymentGatewayImpl:
    return MercadoPagoPaymentGatewayImpl(client=mock_client)


class TestGetPayment:
    @pytest.mark.asyncio
    async def test_parses_payment_and_metadata(self, gateway, mock_client) -> None:
        mock_client.get_payment = AsyncMock(
            return_value={
                'id': 987,
                'status': 'approved',
                'transaction_amount': 225.5,
                'external_reference': 'order-1',
                'metadata': {
                    'order_id': 'order-1',
                    'user_id': '2',
                    'producer_id': 7,
                    'marketplace_fee': '2500',
                    'line_items': [
                        {'event_id': '1', 'fare_class': 'half', 'quantity': 2, 'unit_price': 5000}
                    ],
                },
            }
        )

        payment = await gateway.get_payment(payment_id='987')

        assert payment.id == '987'
        assert payment.status == PaymentStatus.APPROVED
        assert payment.transaction_amount == 22550
        assert payment.order_id == 'order-1'
        assert payment.metadata.user_id == 2
        assert payment.metadata.producer_id == 7
        assert payment.metadata.marketplace_fee == 2500
        assert payment.metadata.line_items == [
            LineItem(event_id=1, fare_class=FareClass.HALF, quantity=2, unit_price=5000)
        ]

    @pytest.mark.asyncio
    async def test_missing_metadata_and_unknown_status(self, gateway, mock_client) -> None:
        mock_client.get_payment = AsyncMock(
            return_value={'id': 5, 'status': 'something_new', 'external_reference': 'order-9'}
        )

        payment = await gateway.get_payment(payment_id='5')

        assert payment.status == PaymentStatus.UNKNOWN
        assert payment.transaction_amount == 0
        assert payment.metadata.marketplace_fee is None
        assert payment.metadata.order_id is None
        assert payment.order_id == 'order-9'


class TestCreatePreference:
    @pytest.mark.asyncio
    async def test_sends_decimal_prices_and_reads_checkout_url(self, gateway, mock_client) -> None:
        mock_client.create_preference = AsyncMock(
            return_value={'id': 'pref-1', 'init_point': 'https://pay.test/checkout/pref-1'}
        )
        metadata = PaymentMetadata(order_id='order-1', user_id=2, producer_id=7)

        preference = await gateway.create_preference(
            request=PreferenceRequest(
                order_id='order-1',
                items=[PreferenceItem(title='Summer Rock Night - full', quantity=2, unit_price=10050)],
                metadata=metadata,
                expires_at=datetime(2025, 1, 10, 12, 30, tzinfo=timezone.utc),
            )
        )

        assert preference.id == 'pref-1'
        assert preference.checkout_url == 'https://pay.test/checkout/pref-1'
        body = mock_client.create_preference.await_args.kwargs['body']
        assert body['external_reference'] == 'order-1'
        assert body['items'][0]['unit_price'] == 100.5
        assert body['items'][0]['quantity'] == 2
        assert body['metadata']['order_id'] == 'order-1'
