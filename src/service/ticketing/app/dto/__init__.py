"""Application layer DTOs"""

from src.service.ticketing.app.dto.checkout_result import CheckoutResult
from src.service.ticketing.app.dto.payment_notification import (
    PaymentNotification,
    WebhookOutcome,
)

__all__ = [
    'CheckoutResult',
    'PaymentNotification',
    'WebhookOutcome',
]
