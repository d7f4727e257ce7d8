from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.cancel_order_use_case import CancelOrderUseCase
from src.service.ticketing.app.command.checkout_cart_use_case import CheckoutCartUseCase
from src.service.ticketing.app.command.refund_order_use_case import RefundOrderUseCase
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.driving_adapter.http_controller.auth.user_header import (
    get_current_user_id,
)
from src.service.ticketing.driving_adapter.http_controller.schema.order_schema import (
    CheckoutResponse,
    OrderTicketsResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/checkout')
@Logger.io
async def checkout(
    user_id: int = Depends(get_current_user_id),
    use_case: CheckoutCartUseCase = Depends(CheckoutCartUseCase.depends),
) -> CheckoutResponse:
    """Hold every ticket in the caller's cart and open a payment preference for them."""
    with tracer.start_as_current_span('controller.checkout') as span:
        span.set_attribute('user_id', user_id)

        result = await use_case.execute(user_id=user_id)
        span.set_attribute('order_id', result.order_id)

        return CheckoutResponse(
            order_id=result.order_id,
            checkout_url=result.checkout_url,
            expires_at=result.expires_at,
            total=result.total,
            marketplace_fee=result.marketplace_fee,
        )


@router.post('/order/{order_id}/cancel')
@Logger.io
async def cancel_order(
    order_id: str,
    user_id: int = Depends(get_current_user_id),
    use_case: CancelOrderUseCase = Depends(CancelOrderUseCase.depends),
) -> OrderTicketsResponse:
    tickets = await use_case.execute(order_id=order_id, user_id=user_id)
    return OrderTicketsResponse(
        order_id=order_id,
        status=TicketStatus.CANCELLED.value,
        tickets=[TicketResponse.from_entity(ticket) for ticket in tickets],
    )


@router.post('/order/{order_id}/refund')
@Logger.io
async def refund_order(
    order_id: str,
    user_id: int = Depends(get_current_user_id),
    use_case: RefundOrderUseCase = Depends(RefundOrderUseCase.depends),
) -> OrderTicketsResponse:
    with tracer.start_as_current_span('controller.refund_order') as span:
        span.set_attribute('order_id', order_id)
        span.set_attribute('user_id', user_id)

        tickets = await use_case.execute(order_id=order_id, user_id=user_id)
        return OrderTicketsResponse(
            order_id=order_id,
            status=TicketStatus.REFUNDED.value,
            tickets=[TicketResponse.from_entity(ticket) for ticket in tickets],
        )
