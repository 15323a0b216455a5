from typing import AsyncContextManager, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_movie_query_repo import IMovieQueryRepo
from src.service.cinema.domain.entity.movie_entity import MovieEntity
from src.service.cinema.driven_adapter.model.movie_model import MovieModel


def movie_model_to_entity(movie_model: MovieModel) -> MovieEntity:
    return MovieEntity(
        id=movie_model.id,
        title=movie_model.title,
        overview=movie_model.overview,
        poster_path=movie_model.poster_path,
        backdrop_path=movie_model.backdrop_path,
        release_date=movie_model.release_date,
        original_language=movie_model.original_language,
        tagline=movie_model.tagline,
        genres=list(movie_model.genres or []),
        casts=list(movie_model.casts or []),
        vote_average=movie_model.vote_average,
        runtime=movie_model.runtime,
    )


class MovieQueryRepoImpl(IMovieQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def list_by_ids(self, *, movie_ids: List[str]) -> List[MovieEntity]:
        if not movie_ids:
            return []
        async with self.session_factory() as session:
            result = await session.execute(select(MovieModel).where(MovieModel.id.in_(movie_ids)))
            return [movie_model_to_entity(m) for m in result.scalars().all()]
