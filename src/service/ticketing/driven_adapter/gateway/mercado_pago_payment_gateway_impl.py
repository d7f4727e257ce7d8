from typing import Any, Optional

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.payment.mercado_pago_client import MercadoPagoClient
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.shared_kernel.domain.value_object.money import to_cents, to_decimal
from src.service.ticketing.domain.value_object.payment import (
    CheckoutPreference,
    LineItem,
    PaymentDetails,
    PaymentMetadata,
    PaymentStatus,
    PreferenceRequest,
    RefundResult,
)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)


class MercadoPagoPaymentGatewayImpl(IPaymentGateway):
    def __init__(self, *, client: MercadoPagoClient) -> None:
        self.client = client

    @staticmethod
    def _parse_metadata(raw: Optional[dict[str, Any]]) -> PaymentMetadata:
        raw = raw or {}
        return PaymentMetadata(
            order_id=str(raw['order_id']) if raw.get('order_id') else None,
            user_id=_optional_int(raw.get('user_id')),
            producer_id=_optional_int(raw.get('producer_id')),
            marketplace_fee=_optional_int(raw.get('marketplace_fee')),
            line_items=[
                LineItem(
                    event_id=int(item['event_id']),
                    fare_class=item['fare_class'],
                    quantity=int(item['quantity']),
                    unit_price=int(item['unit_price']),
                )
                for item in raw.get('line_items') or []
            ],
            kind=raw.get('kind'),
        )

    @Logger.io
    async def get_payment(self, *, payment_id: str) -> PaymentDetails:
        data = await self.client.get_payment(payment_id=payment_id)
        return PaymentDetails(
            id=str(data.get('id', payment_id)),
            status=PaymentStatus.parse(data.get('status')),
            transaction_amount=to_cents(data.get('transaction_amount') or 0),
            external_reference=data.get('external_reference'),
            metadata=self._parse_metadata(data.get('metadata')),
        )

    @Logger.io
    async def create_preference(self, *, request: PreferenceRequest) -> CheckoutPreference:
        frontend_url = settings.FRONTEND_URL.rstrip('/')
        body = {
            'items': [
                {
                    'title': item.title,
                    'quantity': item.quantity,
                    'unit_price': float(to_decimal(item.unit_price)),
                    'currency_id': settings.CURRENCY,
                }
                for item in request.items
            ],
            'external_reference': request.order_id,
            'metadata': request.metadata.to_dict(),
            'notification_url': settings.PAYMENT_NOTIFICATION_URL,
            'back_urls': {
                'success': f'{frontend_url}/checkout/success',
                'failure': f'{frontend_url}/checkout/failure',
                'pending': f'{frontend_url}/checkout/pending',
            },
            'auto_return': 'approved',
            'expires': True,
            'expiration_date_to': request.expires_at.isoformat(timespec='milliseconds'),
        }
        data = await self.client.create_preference(body=body)
        return CheckoutPreference(id=str(data['id']), checkout_url=data['init_point'])

    @Logger.io
    async def refund_payment(self, *, payment_id: str, idempotency_key: str) -> RefundResult:
        data = await self.client.refund_payment(
            payment_id=payment_id, idempotency_key=idempotency_key
        )
        return RefundResult(id=str(data.get('id', '')), status=str(data.get('status', '')))
