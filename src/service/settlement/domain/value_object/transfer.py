from typing import List

import attrs

from src.service.settlement.domain.entity.payout_entity import Payout


@attrs.define(frozen=True)
class TransferRequest:
    receiver_account_id: str
    amount: int
    currency: str
    description: str
    idempotency_key: str


@attrs.define(frozen=True)
class TransferReceipt:
    id: str


@attrs.define
class SettlementReport:
    paid: List[Payout] = attrs.field(factory=list)
    failed: List[Payout] = attrs.field(factory=list)
    # Settled in memory but the status write failed; still pending in the database
    unsaved: List[Payout] = attrs.field(factory=list)

    @property
    def attempted(self) -> int:
        return len(self.paid) + len(self.failed) + len(self.unsaved)
