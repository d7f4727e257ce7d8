from abc import ABC, abstractmethod
from typing import Optional


class IProducerAccountQueryRepo(ABC):
    @abstractmethod
    async def get_payment_account_id(self, *, producer_id: int) -> Optional[str]:
        """Payment processor account receiving the producer's payouts, if linked."""
        pass
