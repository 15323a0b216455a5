from datetime import date, datetime
from typing import Optional

from sqlalchemy import Date, DateTime, Float, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.db_setting import Base


class MovieModel(Base):
    __tablename__ = 'movie'

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # TMDB id
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    overview: Mapped[str] = mapped_column(Text, nullable=False, default='')
    poster_path: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    backdrop_path: Mapped[str] = mapped_column(String(255), nullable=False, default='')
    release_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    original_language: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    tagline: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    genres: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    casts: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    vote_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    runtime: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f'<MovieModel(id={self.id}, title={self.title})>'
