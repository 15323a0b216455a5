"""
Caller-scoped endpoints under /api/user.

Every failure inside a handler is logged and answered as
`{success: false, message}` with status 200, which is the contract the web
client relies on. Authentication failures are the exception: they are raised
before the handler runs and surface as 401.
"""

from typing import Any, Dict, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Cookie, Depends, Header

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.command.toggle_favorite_movie_use_case import (
    ToggleFavoriteMovieUseCase,
)
from src.service.cinema.app.query.list_favorite_movies_use_case import ListFavoriteMoviesUseCase
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.driving_adapter.http_controller.auth.clerk_auth import ClerkAuth
from src.service.cinema.driving_adapter.http_controller.schema.user_schema import (
    BookingResponse,
    MovieResponse,
    UpdateFavoriteRequest,
)


router = APIRouter()


def _failure(error: Exception) -> Dict[str, Any]:
    Logger.base.error(f'[USER-API] {type(error).__name__}: {error}')
    return {'success': False, 'message': str(error)}


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if authorization and authorization.lower().startswith('bearer '):
        return authorization[7:].strip() or None
    return None


@inject
async def get_current_user_id(
    clerk_auth: ClerkAuth = Depends(Provide[Container.clerk_auth]),
    authorization: Optional[str] = Header(None),
    session_token: Optional[str] = Cookie(None, alias='__session'),
) -> str:
    """Clerk user id of the caller, from the Bearer header or the `__session` cookie."""
    return await clerk_auth.get_user_id(_bearer_token(authorization) or session_token)


@router.get('/bookings')
@Logger.io
async def get_user_bookings(
    user_id: str = Depends(get_current_user_id),
    use_case: ListUserBookingsUseCase = Depends(ListUserBookingsUseCase.depends),
) -> Dict[str, Any]:
    try:
        bookings = await use_case.execute(user_id=user_id)
    except Exception as e:
        return _failure(e)
    return {
        'success': True,
        'bookings': [BookingResponse.from_details(b).to_json() for b in bookings],
    }


@router.post('/update-favorite')
@Logger.io
async def update_favorite(
    request: UpdateFavoriteRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: ToggleFavoriteMovieUseCase = Depends(ToggleFavoriteMovieUseCase.depends),
) -> Dict[str, Any]:
    try:
        await use_case.execute(user_id=user_id, movie_id=request.movieId)
    except Exception as e:
        return _failure(e)
    return {'success': True, 'message': 'Favourite movies updated successfully'}


@router.get('/favorites')
@Logger.io
async def get_favorites(
    user_id: str = Depends(get_current_user_id),
    use_case: ListFavoriteMoviesUseCase = Depends(ListFavoriteMoviesUseCase.depends),
) -> Dict[str, Any]:
    try:
        movies = await use_case.execute(user_id=user_id)
    except Exception as e:
        return _failure(e)
    return {
        'success': True,
        'movies': [MovieResponse.from_entity(m).model_dump(mode='json') for m in movies],
    }
