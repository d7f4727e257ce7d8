from typing import List

import attrs

from src.service.ticketing.domain.enum.fare_class import FareClass


MAX_TICKETS_PER_LINE = 8


def _validate_quantity(instance: object, attribute: attrs.Attribute, value: int) -> None:
    if not 1 <= value <= MAX_TICKETS_PER_LINE:
        raise ValueError(f'quantity must be between 1 and {MAX_TICKETS_PER_LINE}')


@attrs.define(frozen=True)
class CartItem:
    event_id: int
    fare_class: FareClass = attrs.field(converter=FareClass)
    quantity: int = attrs.field(validator=_validate_quantity)
    unit_price: int

    @property
    def subtotal(self) -> int:
        return self.quantity * self.unit_price


@attrs.define
class Cart:
    user_id: int
    items: List[CartItem] = attrs.field(factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total(self) -> int:
        return sum(item.subtotal for item in self.items)

    @property
    def event_ids(self) -> list[int]:
        return sorted({item.event_id for item in self.items})
