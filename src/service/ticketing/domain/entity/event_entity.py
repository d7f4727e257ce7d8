from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.fare_class import FareClass


def _validate_non_empty_string(instance: object, attribute: attrs.Attribute, value: str) -> None:
    if not value or not value.strip():
        raise ValueError(f'Event {attribute.name} cannot be empty')


def _validate_non_negative(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if value < 0:
        raise ValueError(f'Event {attribute.name} cannot be negative')


@attrs.define
class EventEntity:
    name: str = attrs.field(validator=_validate_non_empty_string)
    producer_id: int
    venue_name: str = attrs.field(validator=_validate_non_empty_string)
    starts_at: datetime
    full_price: int = attrs.field(validator=_validate_non_negative)
    half_price: int = attrs.field(validator=_validate_non_negative)
    # Unsold tickets per fare class
    full_count: int = attrs.field(default=0, validator=_validate_non_negative)
    half_count: int = attrs.field(default=0, validator=_validate_non_negative)
    id: Optional[int] = None

    def price_for(self, fare_class: FareClass) -> int:
        return self.full_price if fare_class == FareClass.FULL else self.half_price

    def available(self, fare_class: FareClass) -> int:
        return self.full_count if fare_class == FareClass.FULL else self.half_count

    def has_started(self, *, now: datetime) -> bool:
        return now >= self.starts_at
