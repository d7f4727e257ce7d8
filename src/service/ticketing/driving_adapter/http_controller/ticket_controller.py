from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.reserve_tickets_use_case import ReserveTicketsUseCase
from src.service.ticketing.domain.enum.fare_class import FareClass
from src.service.ticketing.driving_adapter.http_controller.auth.user_header import (
    get_current_user_id,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketReserveRequest,
    TicketReserveResponse,
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/reserve', status_code=status.HTTP_201_CREATED)
@Logger.io
async def reserve_tickets(
    request: TicketReserveRequest,
    user_id: int = Depends(get_current_user_id),
    use_case: ReserveTicketsUseCase = Depends(ReserveTicketsUseCase.depends),
) -> TicketReserveResponse:
    with tracer.start_as_current_span('controller.reserve_tickets') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('fare_class', request.fare_class)
        span.set_attribute('quantity', request.quantity)
        span.set_attribute('user_id', user_id)

        tickets = await use_case.execute(
            user_id=user_id,
            event_id=request.event_id,
            fare_class=FareClass(request.fare_class),
            quantity=request.quantity,
        )

        return TicketReserveResponse(
            order_id=tickets[0].order_id,
            tickets=[TicketResponse.from_entity(ticket) for ticket in tickets],
        )
