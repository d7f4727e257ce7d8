from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base
from src.platform.types.utc_datetime import UtcDateTime


class SchedulerLockModel(Base):
    __tablename__ = 'scheduler_lock'

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    is_running: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    owner: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
