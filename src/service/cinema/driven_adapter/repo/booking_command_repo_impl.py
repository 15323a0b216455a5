from typing import AsyncContextManager, Callable

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.driven_adapter.model.booking_model import BookingModel


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def delete(self, *, booking_id: str) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                delete(BookingModel).where(BookingModel.id == booking_id)
            )
            await session.commit()
            return result.rowcount > 0  # pyright: ignore[reportAttributeAccessIssue]
