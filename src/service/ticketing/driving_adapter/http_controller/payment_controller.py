from fastapi import APIRouter, Depends, Request
import orjson

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.handle_payment_notification_use_case import (
    HandlePaymentNotificationUseCase,
)
from src.service.ticketing.driving_adapter.http_controller.schema.payment_schema import (
    PaymentWebhookAck,
)


router = APIRouter()


@router.post('/webhook')
async def payment_webhook(
    request: Request,
    use_case: HandlePaymentNotificationUseCase = Depends(
        HandlePaymentNotificationUseCase.depends
    ),
) -> PaymentWebhookAck:
    """
    Payment processor notification endpoint.

    Every notification that reaches the handler is acknowledged with 200, including
    malformed and failed ones; the outcome is reported in the body and in metrics.
    """
    body = await request.body()
    try:
        payload = orjson.loads(body)
    except orjson.JSONDecodeError:
        Logger.base.warning(f'⚠️ [WEBHOOK] Body is not JSON ({len(body)} bytes)')
        payload = None

    outcome = await use_case.execute(payload=payload)
    return PaymentWebhookAck(outcome=outcome.value)
