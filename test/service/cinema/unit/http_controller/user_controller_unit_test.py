"""
Unit tests for the /api/user endpoints

Use cases are replaced through FastAPI dependency overrides and Clerk through a
container override, so only routing, (de)serialization and the
`{success, ...}` envelope are under test.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.constant.route_constant import (
    USER_BOOKINGS,
    USER_FAVORITES,
    USER_UPDATE_FAVORITE,
)
from src.platform.exception.exceptions import AuthenticationError
from src.service.cinema.app.command.toggle_favorite_movie_use_case import (
    ToggleFavoriteMovieUseCase,
)
from src.service.cinema.app.query.list_favorite_movies_use_case import ListFavoriteMoviesUseCase
from src.service.cinema.app.query.list_user_bookings_use_case import ListUserBookingsUseCase
from src.service.cinema.domain.entity.booking_entity import BookingEntity
from src.service.cinema.domain.entity.movie_entity import MovieEntity
from src.service.cinema.domain.entity.show_entity import ShowEntity
from src.service.cinema.domain.value_object.show_details import BookingDetails


@asynccontextmanager
async def _noop_lifespan(app: FastAPI):
    yield


def _make_booking_details() -> BookingDetails:
    return BookingDetails(
        booking=BookingEntity(
            id='booking-1',
            user_id='user_1',
            show_id='show-1',
            amount=500,
            booked_seats=['A1', 'A2'],
            is_paid=False,
            payment_link='https://checkout.stripe.test/c/pay_123',
            created_at=datetime(2025, 7, 1, 7, 55, tzinfo=timezone.utc),
        ),
        show=ShowEntity(
            id='show-1',
            movie_id='550',
            show_date_time=datetime(2025, 7, 1, 18, 0, tzinfo=timezone.utc),
            show_price=250,
            occupied_seats={'A1': 'user_1', 'A2': 'user_1'},
        ),
        movie=MovieEntity(id='550', title='Fight Club', runtime=139),
    )


@pytest.mark.unit
class TestUserController:
    @pytest.fixture
    def clerk_auth(self) -> Mock:
        auth = Mock()
        auth.get_user_id = AsyncMock(return_value='user_1')
        return auth

    @pytest.fixture
    def use_case(self) -> Mock:
        use_case = Mock()
        use_case.execute = AsyncMock()
        return use_case

    @pytest.fixture
    def client(self, clerk_auth, use_case):
        container.wire(modules=WIRE_MODULES)
        app = create_app(lifespan=_noop_lifespan, title_suffix=' (Test)')
        for use_case_cls in (
            ListUserBookingsUseCase,
            ToggleFavoriteMovieUseCase,
            ListFavoriteMoviesUseCase,
        ):
            app.dependency_overrides[use_case_cls.depends] = lambda: use_case

        with container.clerk_auth.override(clerk_auth):
            yield TestClient(app)

        container.unwire()

    def test_bookings_are_listed_with_camel_case_fields(self, client, use_case):
        # Arrange
        use_case.execute.return_value = [_make_booking_details()]

        # Act
        response = client.get(USER_BOOKINGS, headers={'Authorization': 'Bearer tok'})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body['success'] is True
        booking = body['bookings'][0]
        assert booking['user'] == 'user_1'
        assert booking['bookedSeats'] == ['A1', 'A2']
        assert booking['isPaid'] is False
        assert booking['paymentLink'] == 'https://checkout.stripe.test/c/pay_123'
        assert booking['show']['showDateTime'].startswith('2025-07-01T18:00:00')
        assert booking['show']['movie']['title'] == 'Fight Club'
        use_case.execute.assert_awaited_once_with(user_id='user_1')

    def test_use_case_failure_is_reported_in_body(self, client, use_case):
        # Arrange
        use_case.execute.side_effect = RuntimeError('database unavailable')

        # Act
        response = client.get(USER_BOOKINGS, headers={'Authorization': 'Bearer tok'})

        # Assert
        assert response.status_code == 200
        assert response.json() == {'success': False, 'message': 'database unavailable'}

    def test_update_favorite_toggles_for_caller(self, client, use_case):
        # Act
        response = client.post(
            USER_UPDATE_FAVORITE,
            json={'movieId': '550'},
            headers={'Authorization': 'Bearer tok'},
        )

        # Assert
        assert response.json() == {
            'success': True,
            'message': 'Favourite movies updated successfully',
        }
        use_case.execute.assert_awaited_once_with(user_id='user_1', movie_id='550')

    def test_update_favorite_without_movie_id_is_rejected(self, client, use_case):
        # Act
        response = client.post(
            USER_UPDATE_FAVORITE, json={}, headers={'Authorization': 'Bearer tok'}
        )

        # Assert
        assert response.status_code == 400
        assert response.json()['success'] is False
        use_case.execute.assert_not_awaited()

    def test_favorites_are_listed(self, client, use_case):
        # Arrange
        use_case.execute.return_value = [
            MovieEntity(id='550', title='Fight Club', poster_path='/fc.jpg', vote_average=8.4)
        ]

        # Act
        response = client.get(USER_FAVORITES, headers={'Authorization': 'Bearer tok'})

        # Assert
        body = response.json()
        assert body['success'] is True
        assert body['movies'][0]['id'] == '550'
        assert body['movies'][0]['poster_path'] == '/fc.jpg'

    def test_session_cookie_is_accepted(self, client, clerk_auth, use_case):
        # Arrange
        use_case.execute.return_value = []
        client.cookies.set('__session', 'cookie-token')

        # Act
        response = client.get(USER_FAVORITES)

        # Assert
        assert response.json() == {'success': True, 'movies': []}
        clerk_auth.get_user_id.assert_awaited_once_with('cookie-token')

    def test_bearer_header_wins_over_cookie(self, client, clerk_auth, use_case):
        # Arrange
        use_case.execute.return_value = []
        client.cookies.set('__session', 'cookie-token')

        # Act
        client.get(USER_FAVORITES, headers={'Authorization': 'Bearer header-token'})

        # Assert
        clerk_auth.get_user_id.assert_awaited_once_with('header-token')

    def test_unauthenticated_request_is_401(self, client, clerk_auth, use_case):
        # Arrange
        clerk_auth.get_user_id.side_effect = AuthenticationError('Not authenticated')

        # Act
        response = client.get(USER_BOOKINGS)

        # Assert
        assert response.status_code == 401
        assert response.json() == {'success': False, 'detail': 'Not authenticated'}
        use_case.execute.assert_not_awaited()
