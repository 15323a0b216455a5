from datetime import datetime
from typing import AsyncContextManager, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.cinema.domain.entity.show_entity import ShowEntity
from src.service.cinema.domain.value_object.show_details import ShowDetails
from src.service.cinema.driven_adapter.model.show_model import ShowModel
from src.service.cinema.driven_adapter.repo.movie_query_repo_impl import movie_model_to_entity


def show_model_to_entity(show_model: ShowModel) -> ShowEntity:
    return ShowEntity(
        id=show_model.id,
        movie_id=show_model.movie_id,
        show_date_time=show_model.show_date_time,
        show_price=show_model.show_price,
        occupied_seats=dict(show_model.occupied_seats or {}),
        created_at=show_model.created_at,
    )


class ShowQueryRepoImpl(IShowQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, show_id: str) -> Optional[ShowEntity]:
        async with self.session_factory() as session:
            show_model = await session.get(ShowModel, show_id)
            return show_model_to_entity(show_model) if show_model else None

    @Logger.io
    async def list_starting_between_with_movie(
        self, *, start: datetime, end: datetime
    ) -> List[ShowDetails]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ShowModel)
                .where(ShowModel.show_date_time >= start, ShowModel.show_date_time <= end)
                .order_by(ShowModel.show_date_time)
            )
            return [
                ShowDetails(
                    show=show_model_to_entity(m),
                    movie=movie_model_to_entity(m.movie) if m.movie else None,
                )
                for m in result.scalars().all()
            ]
