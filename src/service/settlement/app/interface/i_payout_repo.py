from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from src.service.settlement.domain.entity.payout_entity import Payout


class IPayoutRepo(ABC):
    @abstractmethod
    async def add_if_absent(self, *, payout: Payout) -> bool:
        """
        Insert unless the order already has a payout.

        Returns:
            True if inserted, False if a payout for ``payout.order_id`` exists
        """
        pass

    @abstractmethod
    async def get_by_order_id(self, *, order_id: str) -> Optional[Payout]:
        pass

    @abstractmethod
    async def list_due(self, *, now: datetime) -> List[Payout]:
        """Pending payouts whose release date is at or before ``now``."""
        pass

    @abstractmethod
    async def save_transition(self, *, payout: Payout) -> bool:
        """
        Persist a status transition of a pending payout.

        Returns:
            False if the stored payout was no longer pending (nothing written)
        """
        pass
