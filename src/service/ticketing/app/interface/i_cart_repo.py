from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.cart_entity import Cart


class ICartRepo(ABC):
    @abstractmethod
    async def get_by_user_id(self, *, user_id: int) -> Optional[Cart]:
        pass

    @abstractmethod
    async def save(self, *, cart: Cart) -> Cart:
        """Insert or replace the user's cart."""
        pass

    @abstractmethod
    async def delete_by_user_id(self, *, user_id: int) -> bool:
        pass
