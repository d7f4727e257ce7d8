from datetime import datetime

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UtcDateTime


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    producer_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    venue_name: Mapped[str] = mapped_column(String(255), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    full_price: Mapped[int] = mapped_column(Integer, nullable=False)
    half_price: Mapped[int] = mapped_column(Integer, nullable=False)
    full_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    half_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint('full_count >= 0', name='ck_event_full_count_non_negative'),
        CheckConstraint('half_count >= 0', name='ck_event_half_count_non_negative'),
    )
