from datetime import datetime
from typing import List

from pydantic import BaseModel

from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


class CheckoutResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'order_id': '01936d8f-5e70-7000-8000-000000000001',
                'checkout_url': 'https://www.mercadopago.com.br/checkout/v1/redirect?pref_id=123',
                'expires_at': '2025-01-10T11:00:00Z',
                'total': 25000,
                'marketplace_fee': 2500,
            }
        },
    }

    order_id: str
    checkout_url: str
    expires_at: datetime
    total: int  # cents
    marketplace_fee: int  # cents


class OrderTicketsResponse(BaseModel):
    order_id: str
    status: str
    tickets: List[TicketResponse]
