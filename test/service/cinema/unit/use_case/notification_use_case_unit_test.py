"""
Unit tests for the one-shot notification use cases

- SendBookingConfirmationEmailUseCase: one e-mail to the booking's user
- SendNewShowNotificationsUseCase: sequential broadcast to every user
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from src.platform.exception.exceptions import NotFoundError
from src.service.cinema.app.command.send_booking_confirmation_email_use_case import (
    SendBookingConfirmationEmailUseCase,
)
from src.service.cinema.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.cinema.domain.entity.booking_entity import BookingEntity
from src.service.cinema.domain.entity.movie_entity import MovieEntity
from src.service.cinema.domain.entity.show_entity import ShowEntity
from src.service.cinema.domain.entity.user_entity import UserEntity
from src.service.cinema.domain.value_object.show_details import BookingDetails


def _make_details(with_movie: bool = True) -> BookingDetails:
    return BookingDetails(
        booking=BookingEntity(
            id='booking-1',
            user_id='user_1',
            show_id='show-1',
            amount=500,
            booked_seats=['A1', 'A2'],
            is_paid=True,
        ),
        show=ShowEntity(
            id='show-1',
            movie_id='movie-1',
            show_date_time=datetime(2025, 7, 1, 18, 30, tzinfo=timezone.utc),
            show_price=250,
        ),
        movie=MovieEntity(id='movie-1', title='Dune: Part Two') if with_movie else None,
    )


@pytest.mark.unit
class TestSendBookingConfirmationEmail:
    @pytest.fixture
    def booking_query_repo(self) -> AsyncMock:
        repo = AsyncMock()
        repo.get_by_id_with_details = AsyncMock(return_value=_make_details())
        return repo

    @pytest.fixture
    async def seeded_user_repo(self, user_repo):
        await user_repo.create(
            user=UserEntity(id='user_1', email='paul@example.com', name='Paul Atreides')
        )
        return user_repo

    @pytest.fixture
    def use_case(
        self, booking_query_repo, seeded_user_repo, email_sender
    ) -> SendBookingConfirmationEmailUseCase:
        return SendBookingConfirmationEmailUseCase(
            booking_query_repo=booking_query_repo,
            user_query_repo=seeded_user_repo,
            email_sender=email_sender,
            frontend_url='https://movies.example.com/',
        )

    @pytest.mark.asyncio
    async def test_sends_confirmation_to_booking_user(self, use_case, email_sender):
        # Act
        result = await use_case.execute(booking_id='booking-1')

        # Assert
        assert result == {'sent_to': 'paul@example.com'}
        kwargs = email_sender.send_email.await_args.kwargs
        assert kwargs['to'] == 'paul@example.com'
        assert kwargs['subject'] == 'Payment Confirmation: "Dune: Part Two" booked!'
        assert 'Paul Atreides' in kwargs['body']
        assert 'A1, A2' in kwargs['body']
        assert 'https://movies.example.com/my-bookings' in kwargs['body']

    @pytest.mark.asyncio
    async def test_missing_booking_raises_not_found(
        self, use_case, booking_query_repo, email_sender
    ):
        # Arrange
        booking_query_repo.get_by_id_with_details.return_value = None

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(booking_id='booking-1')
        email_sender.send_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dangling_movie_raises_not_found(self, use_case, booking_query_repo):
        # Arrange
        booking_query_repo.get_by_id_with_details.return_value = _make_details(with_movie=False)

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(booking_id='booking-1')

    @pytest.mark.asyncio
    async def test_missing_user_raises_not_found(self, use_case, seeded_user_repo):
        # Arrange
        await seeded_user_repo.delete(user_id='user_1')

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(booking_id='booking-1')

    @pytest.mark.asyncio
    async def test_user_supplied_text_is_escaped(
        self, use_case, seeded_user_repo, email_sender
    ):
        # Arrange
        await seeded_user_repo.update(
            user=UserEntity(id='user_1', email='paul@example.com', name='<script>x</script>')
        )

        # Act
        await use_case.execute(booking_id='booking-1')

        # Assert
        body = email_sender.send_email.await_args.kwargs['body']
        assert '<script>' not in body
        assert '&lt;script&gt;' in body


@pytest.mark.unit
class TestSendNewShowNotifications:
    @pytest.fixture
    async def seeded_user_repo(self, user_repo):
        for index in range(1, 4):
            await user_repo.create(
                user=UserEntity(id=f'u{index}', email=f'u{index}@example.com', name=f'User {index}')
            )
        return user_repo

    @pytest.fixture
    def use_case(self, seeded_user_repo, email_sender) -> SendNewShowNotificationsUseCase:
        return SendNewShowNotificationsUseCase(
            user_query_repo=seeded_user_repo,
            email_sender=email_sender,
            frontend_url='https://movies.example.com',
        )

    @pytest.mark.asyncio
    async def test_every_user_is_notified_in_order(self, use_case, email_sender):
        # Act
        result = await use_case.execute(movie_title='Oppenheimer', movie_id='872585')

        # Assert
        assert result == {'message': 'Notifications sent.'}
        recipients = [call.kwargs['to'] for call in email_sender.send_email.await_args_list]
        assert recipients == ['u1@example.com', 'u2@example.com', 'u3@example.com']
        assert (
            email_sender.send_email.await_args.kwargs['subject']
            == '🎬 New Show Added: Oppenheimer'
        )

    @pytest.mark.asyncio
    async def test_no_users_sends_nothing(self, user_repo, email_sender):
        # Arrange
        use_case = SendNewShowNotificationsUseCase(
            user_query_repo=user_repo,
            email_sender=email_sender,
            frontend_url='https://movies.example.com',
        )

        # Act
        result = await use_case.execute(movie_title='Oppenheimer', movie_id='872585')

        # Assert
        assert result == {'message': 'Notifications sent.'}
        email_sender.send_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failed_send_aborts_the_remaining_ones(self, use_case, email_sender):
        # Arrange
        email_sender.send_email.side_effect = [None, ConnectionError('relay refused'), None]

        # Act & Assert
        with pytest.raises(ConnectionError, match='relay refused'):
            await use_case.execute(movie_title='Oppenheimer', movie_id='872585')
        assert email_sender.send_email.await_count == 2
