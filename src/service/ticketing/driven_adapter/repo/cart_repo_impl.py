from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.dialect_insert import dialect_insert
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
from src.service.ticketing.domain.entity.cart_entity import Cart, CartItem
from src.service.ticketing.driven_adapter.model.cart_model import CartModel


_CART = CartModel.__table__


class CartRepoImpl(ICartRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _items_to_json(cart: Cart) -> list[dict]:
        return [
            {
                'event_id': item.event_id,
                'fare_class': item.fare_class.value,
                'quantity': item.quantity,
                'unit_price': item.unit_price,
            }
            for item in cart.items
        ]

    @Logger.io
    async def get_by_user_id(self, *, user_id: int) -> Optional[Cart]:
        result = await self.session.execute(select(_CART).where(_CART.c.user_id == user_id))
        row = result.mappings().first()
        if row is None:
            return None
        return Cart(user_id=row['user_id'], items=[CartItem(**item) for item in row['items'] or []])

    @Logger.io
    async def save(self, *, cart: Cart) -> Cart:
        items = self._items_to_json(cart)
        stmt = dialect_insert(self.session, _CART).values(user_id=cart.user_id, items=items)  # type: ignore[arg-type]
        await self.session.execute(
            stmt.on_conflict_do_update(index_elements=[_CART.c.user_id], set_={'items': items})
        )
        return cart

    @Logger.io
    async def delete_by_user_id(self, *, user_id: int) -> bool:
        result = await self.session.execute(delete(_CART).where(_CART.c.user_id == user_id))
        return bool(result.rowcount)
