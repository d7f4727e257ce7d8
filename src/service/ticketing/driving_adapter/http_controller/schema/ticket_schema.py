from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.ticketing.domain.entity.cart_entity import MAX_TICKETS_PER_LINE
from src.service.ticketing.domain.entity.ticket_entity import Ticket


class TicketReserveRequest(BaseModel):
    event_id: int
    fare_class: Literal['full', 'half'] = 'full'
    quantity: int = Field(ge=1, le=MAX_TICKETS_PER_LINE)

    model_config = {
        'json_schema_extra': {
            'examples': [
                {'event_id': 1, 'fare_class': 'full', 'quantity': 2},
                {'event_id': 1, 'fare_class': 'half', 'quantity': 1},
            ]
        }
    }


class TicketResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'user_id': 2,
                'event_id': 1,
                'order_id': '01936d8f-5e70-7000-8000-000000000001',
                'fare_class': 'full',
                'unit_price': 10000,
                'status': 'pending',
                'expires_at': '2025-01-10T11:00:00Z',
            }
        },
    }

    id: UUID
    user_id: int
    event_id: int
    order_id: str
    fare_class: str
    unit_price: int  # cents
    status: str
    payment_id: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, ticket: Ticket) -> 'TicketResponse':
        return cls(
            id=ticket.id,
            user_id=ticket.user_id,
            event_id=ticket.event_id,
            order_id=ticket.order_id,
            fare_class=ticket.fare_class.value,
            unit_price=ticket.unit_price,
            status=ticket.status.value,
            payment_id=ticket.payment_id,
            expires_at=ticket.expires_at,
        )


class TicketReserveResponse(BaseModel):
    order_id: str
    tickets: List[TicketResponse]
