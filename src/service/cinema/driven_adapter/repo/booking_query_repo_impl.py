from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.domain.entity.booking_entity import BookingEntity
from src.service.cinema.domain.value_object.show_details import BookingDetails
from src.service.cinema.driven_adapter.model.booking_model import BookingModel
from src.service.cinema.driven_adapter.model.show_model import ShowModel
from src.service.cinema.driven_adapter.repo.movie_query_repo_impl import movie_model_to_entity
from src.service.cinema.driven_adapter.repo.show_query_repo_impl import show_model_to_entity


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(db_booking: BookingModel) -> BookingEntity:
        return BookingEntity(
            id=db_booking.id,
            user_id=db_booking.user_id,
            show_id=db_booking.show_id,
            amount=db_booking.amount,
            booked_seats=list(db_booking.booked_seats or []),
            is_paid=db_booking.is_paid,
            payment_link=db_booking.payment_link,
            created_at=db_booking.created_at,
            updated_at=db_booking.updated_at,
        )

    @classmethod
    def _to_details(cls, db_booking: BookingModel) -> BookingDetails:
        show_model = db_booking.show
        return BookingDetails(
            booking=cls._to_entity(db_booking),
            show=show_model_to_entity(show_model) if show_model else None,
            movie=movie_model_to_entity(show_model.movie)
            if show_model and show_model.movie
            else None,
        )

    @staticmethod
    def _with_show_and_movie():
        return selectinload(BookingModel.show).selectinload(ShowModel.movie)

    @Logger.io
    async def get_by_id(self, *, booking_id: str) -> Optional[BookingEntity]:
        async with self.session_factory() as session:
            db_booking = await session.get(BookingModel, booking_id)
            return self._to_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_by_id_with_details(self, *, booking_id: str) -> Optional[BookingDetails]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BookingModel)
                .options(self._with_show_and_movie())
                .where(BookingModel.id == booking_id)
            )
            db_booking = result.scalar_one_or_none()
            return self._to_details(db_booking) if db_booking else None

    @Logger.io
    async def list_by_user_with_details(self, *, user_id: str) -> List[BookingDetails]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(BookingModel)
                .options(self._with_show_and_movie())
                .where(BookingModel.user_id == user_id)
                .order_by(BookingModel.created_at.desc())
            )
            return [self._to_details(b) for b in result.scalars().all()]
