import pytest

from src.service.ticketing.domain.entity.cart_entity import Cart, CartItem
from src.service.ticketing.domain.enum.fare_class import FareClass


class TestCart:
    def test_totals_and_events(self) -> None:
        cart = Cart(
            user_id=2,
            items=[
                CartItem(event_id=3, fare_class='full', quantity=2, unit_price=10000),
                CartItem(event_id=1, fare_class='half', quantity=1, unit_price=5000),
                CartItem(event_id=3, fare_class='half', quantity=1, unit_price=5000),
            ],
        )

        assert not cart.is_empty
        assert cart.total == 30000
        assert cart.event_ids == [1, 3]
        assert cart.items[0].fare_class is FareClass.FULL

    def test_empty_cart(self) -> None:
        cart = Cart(user_id=2)

        assert cart.is_empty
        assert cart.total == 0

    @pytest.mark.parametrize('quantity', [0, 9])
    def test_quantity_out_of_range(self, quantity: int) -> None:
        with pytest.raises(ValueError, match='quantity'):
            CartItem(event_id=1, fare_class='full', quantity=quantity, unit_price=10000)

    def test_unknown_fare_class(self) -> None:
        with pytest.raises(ValueError):
            CartItem(event_id=1, fare_class='vip', quantity=1, unit_price=10000)
