from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.db_setting import Base


if TYPE_CHECKING:
    from src.service.cinema.driven_adapter.model.movie_model import MovieModel


class ShowModel(Base):
    __tablename__ = 'show'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    movie_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    show_date_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    show_price: Mapped[int] = mapped_column(Integer, nullable=False)
    occupied_seats: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    movie: Mapped[Optional['MovieModel']] = relationship(
        'MovieModel',
        primaryjoin='foreign(ShowModel.movie_id) == MovieModel.id',
        viewonly=True,
        lazy='selectin',
    )
