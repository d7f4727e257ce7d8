"""Payment processor webhook body: ``{"type": "payment", "data": {"id": "123"}}``."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class WebhookOutcome(StrEnum):
    MALFORMED = 'malformed'
    IGNORED = 'ignored'
    CONFIRMED = 'confirmed'
    DUPLICATE = 'duplicate'
    REFUSED = 'refused'
    PENDING = 'pending'
    FAILED = 'failed'


class PaymentNotificationData(BaseModel):
    model_config = ConfigDict(extra='ignore')

    id: str

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        # The processor sends numeric ids in some notification versions
        if isinstance(v, bool) or not isinstance(v, (str, int)) or not str(v).strip():
            raise ValueError('data.id must be a non-empty string or integer')
        return str(v).strip()


class PaymentNotification(BaseModel):
    model_config = ConfigDict(extra='ignore')

    type: str
    data: PaymentNotificationData
