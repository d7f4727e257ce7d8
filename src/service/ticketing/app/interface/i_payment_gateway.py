from abc import ABC, abstractmethod

from src.service.ticketing.domain.value_object.payment import (
    CheckoutPreference,
    PaymentDetails,
    PreferenceRequest,
    RefundResult,
)


class IPaymentGateway(ABC):
    """Payment processor seen from the ticketing service."""

    @abstractmethod
    async def get_payment(self, *, payment_id: str) -> PaymentDetails:
        pass

    @abstractmethod
    async def create_preference(self, *, request: PreferenceRequest) -> CheckoutPreference:
        pass

    @abstractmethod
    async def refund_payment(self, *, payment_id: str, idempotency_key: str) -> RefundResult:
        pass
