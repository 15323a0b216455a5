from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.toggle_favorite_movie_use_case import read_favorites
from src.service.cinema.app.interface.i_identity_provider import IIdentityProvider
from src.service.cinema.app.interface.i_movie_query_repo import IMovieQueryRepo
from src.service.cinema.domain.entity.movie_entity import MovieEntity


class ListFavoriteMoviesUseCase:
    def __init__(
        self, *, identity_provider: IIdentityProvider, movie_query_repo: IMovieQueryRepo
    ) -> None:
        self.identity_provider = identity_provider
        self.movie_query_repo = movie_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        identity_provider: IIdentityProvider = Depends(Provide[Container.identity_provider]),
        movie_query_repo: IMovieQueryRepo = Depends(Provide[Container.movie_query_repo]),
    ) -> Self:
        return cls(identity_provider=identity_provider, movie_query_repo=movie_query_repo)

    @Logger.io
    async def execute(self, *, user_id: str) -> List[MovieEntity]:
        """Favourite ids without a movie record are dropped."""
        metadata = await self.identity_provider.get_private_metadata(user_id=user_id)
        favorites = read_favorites(metadata)
        if not favorites:
            return []
        return await self.movie_query_repo.list_by_ids(movie_ids=favorites)
