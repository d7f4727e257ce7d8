from datetime import datetime
from enum import StrEnum
from typing import Any, List, Optional

import attrs

from src.service.ticketing.domain.enum.fare_class import FareClass


class PaymentStatus(StrEnum):
    APPROVED = 'approved'
    PENDING = 'pending'
    IN_PROCESS = 'in_process'
    AUTHORIZED = 'authorized'
    REJECTED = 'rejected'
    CANCELLED = 'cancelled'
    FAILED = 'failed'
    REFUNDED = 'refunded'
    CHARGED_BACK = 'charged_back'
    UNKNOWN = 'unknown'

    @classmethod
    def parse(cls, value: Any) -> 'PaymentStatus':
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_refusal(self) -> bool:
        return self in (PaymentStatus.REJECTED, PaymentStatus.CANCELLED, PaymentStatus.FAILED)


DONATION_KIND = 'donation'


@attrs.define(frozen=True)
class LineItem:
    event_id: int
    fare_class: FareClass = attrs.field(converter=FareClass)
    quantity: int
    unit_price: int

    def to_dict(self) -> dict[str, Any]:
        return {
            'event_id': self.event_id,
            'fare_class': str(self.fare_class),
            'quantity': self.quantity,
            'unit_price': self.unit_price,
        }


@attrs.define(frozen=True)
class PaymentMetadata:
    """Order description attached to the payment preference and echoed back by the processor."""

    order_id: Optional[str] = None
    user_id: Optional[int] = None
    producer_id: Optional[int] = None
    marketplace_fee: Optional[int] = None  # cents; None when the preference carried none
    line_items: List[LineItem] = attrs.field(factory=list)
    kind: Optional[str] = None

    @property
    def is_donation(self) -> bool:
        return (self.kind or '').lower() == DONATION_KIND

    def to_dict(self) -> dict[str, Any]:
        return {
            'order_id': self.order_id,
            'user_id': self.user_id,
            'producer_id': self.producer_id,
            'marketplace_fee': self.marketplace_fee,
            'line_items': [item.to_dict() for item in self.line_items],
        }


@attrs.define(frozen=True)
class PaymentDetails:
    id: str
    status: PaymentStatus
    transaction_amount: int
    external_reference: Optional[str] = None
    metadata: PaymentMetadata = attrs.field(factory=PaymentMetadata)

    @property
    def order_id(self) -> Optional[str]:
        return self.metadata.order_id or self.external_reference


@attrs.define(frozen=True)
class PreferenceItem:
    title: str
    quantity: int
    unit_price: int


@attrs.define(frozen=True)
class PreferenceRequest:
    order_id: str
    items: List[PreferenceItem]
    metadata: PaymentMetadata
    expires_at: datetime


@attrs.define(frozen=True)
class CheckoutPreference:
    id: str
    checkout_url: str


@attrs.define(frozen=True)
class RefundResult:
    id: str
    status: str

    @property
    def is_approved(self) -> bool:
        return self.status.lower() == PaymentStatus.APPROVED
