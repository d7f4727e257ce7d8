from src.platform.logging.loguru_io import Logger
from src.platform.payment.mercado_pago_client import MercadoPagoClient
from src.service.settlement.app.interface.i_transfer_gateway import ITransferGateway
from src.service.settlement.domain.value_object.transfer import TransferReceipt, TransferRequest
from src.service.shared_kernel.domain.value_object.money import to_decimal


class MercadoPagoTransferGatewayImpl(ITransferGateway):
    def __init__(self, *, client: MercadoPagoClient) -> None:
        self.client = client

    @Logger.io
    async def create_transfer(self, *, request: TransferRequest) -> TransferReceipt:
        data = await self.client.create_transfer(
            body={
                'receiver_id': request.receiver_account_id,
                'amount': float(to_decimal(request.amount)),
                'currency_id': request.currency,
                'description': request.description,
                'external_reference': request.idempotency_key,
            },
            idempotency_key=request.idempotency_key,
        )
        return TransferReceipt(id=str(data['id']))
