from sqlalchemy import JSON, Integer
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class CartModel(Base):
    __tablename__ = 'cart'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    # [{event_id, fare_class, quantity, unit_price}, ...]
    items: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
