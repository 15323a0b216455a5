from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.db_setting import Base


if TYPE_CHECKING:
    from src.service.cinema.driven_adapter.model.show_model import ShowModel


class BookingModel(Base):
    __tablename__ = 'booking'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    show_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    booked_seats: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_link: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    show: Mapped[Optional['ShowModel']] = relationship(
        'ShowModel',
        primaryjoin='foreign(BookingModel.show_id) == ShowModel.id',
        viewonly=True,
        lazy='selectin',
    )
