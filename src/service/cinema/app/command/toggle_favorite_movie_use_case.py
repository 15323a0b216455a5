from typing import Any, Dict, List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_identity_provider import IIdentityProvider


FAVORITES_KEY = 'favorites'


def read_favorites(metadata: Dict[str, Any]) -> List[str]:
    """Favourite movie ids as strings, first occurrence kept (older entries may be numeric)."""
    return list(dict.fromkeys(str(item) for item in metadata.get(FAVORITES_KEY) or []))


class ToggleFavoriteMovieUseCase:
    """
    Add a movie to the caller's favourites, or remove it if already there.

    The list lives in the identity provider's private metadata. The update is a
    plain read-modify-write: two concurrent toggles by the same user can lose one.
    """

    def __init__(self, *, identity_provider: IIdentityProvider) -> None:
        self.identity_provider = identity_provider

    @classmethod
    @inject
    def depends(
        cls,
        identity_provider: IIdentityProvider = Depends(Provide[Container.identity_provider]),
    ) -> Self:
        return cls(identity_provider=identity_provider)

    @Logger.io
    async def execute(self, *, user_id: str, movie_id: str) -> List[str]:
        metadata = await self.identity_provider.get_private_metadata(user_id=user_id)
        favorites = read_favorites(metadata)
        movie_id = str(movie_id)

        if movie_id in favorites:
            favorites = [item for item in favorites if item != movie_id]
        else:
            favorites.append(movie_id)

        metadata[FAVORITES_KEY] = favorites
        await self.identity_provider.update_private_metadata(user_id=user_id, metadata=metadata)
        return favorites
