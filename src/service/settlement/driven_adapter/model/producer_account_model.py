from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class ProducerAccountModel(Base):
    __tablename__ = 'producer_account'

    producer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    payment_account_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
