from typing import AsyncContextManager, Callable, List

from sqlalchemy import String, bindparam, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_show_command_repo import IShowCommandRepo


# Row lock first so the holder check sees the latest committed seats; a seat
# re-booked by another user since the booking was read is never removed.
_RELEASE_HELD_SEATS = text(
    """
    WITH target AS (
        SELECT id, occupied_seats FROM show WHERE id = :show_id FOR UPDATE
    ), held AS (
        SELECT target.id, ARRAY(
            SELECT seat.key
            FROM jsonb_each_text(target.occupied_seats) AS seat
            WHERE seat.key = ANY(:seats) AND seat.value = :holder_id
        ) AS labels
        FROM target
    )
    UPDATE show
    SET occupied_seats = show.occupied_seats - held.labels
    FROM held
    WHERE show.id = held.id
    RETURNING cardinality(held.labels)
    """
).bindparams(bindparam('seats', type_=ARRAY(String)))


class ShowCommandRepoImpl(IShowCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def release_seats(self, *, show_id: str, seats: List[str], holder_id: str) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                _RELEASE_HELD_SEATS,
                {'show_id': show_id, 'seats': list(seats), 'holder_id': holder_id},
            )
            released = result.scalar_one_or_none()
            if released is None:
                raise NotFoundError(f'Show {show_id} not found')
            await session.commit()
            return released
