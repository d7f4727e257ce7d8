from datetime import datetime
from typing import List

import attrs

from src.service.ticketing.domain.entity.ticket_entity import Ticket


@attrs.define(frozen=True)
class CheckoutResult:
    order_id: str
    checkout_url: str
    expires_at: datetime
    total: int
    marketplace_fee: int
    tickets: List[Ticket] = attrs.field(factory=list)
