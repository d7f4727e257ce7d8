from unittest.mock import AsyncMock

import pytest

from src.service.settlement.domain.value_object.transfer import TransferRequest
from src.service.settlement.driven_adapter.gateway.mercado_pago_transfer_gateway_impl import (
    MercadoPagoTransferGatewayImpl,
)


@pytest.mark.asyncio
async def test_create_transfer_forwards_idempotency_key() -> None:
    client = AsyncMock()
    client.create_transfer = AsyncMock(return_value={'id': 4411})
    gateway = MercadoPagoTransferGatewayImpl(client=client)

    receipt = await gateway.create_transfer(
        request=TransferRequest(
            receiver_account_id='acc-7',
            amount=22500,
            currency='BRL',
            description='Payout for order o-1',
            idempotency_key='PAYOUT-o-1',
        )
    )

    assert receipt.id == '4411'
    kwargs = client.create_transfer.await_args.kwargs
    assert kwargs['idempotency_key'] == 'PAYOUT-o-1'
    assert kwargs['body']['amount'] == 225.0
    assert kwargs['body']['receiver_id'] == 'acc-7'
