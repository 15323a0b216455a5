from typing import Any, Dict

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.app.interface.i_email_sender import IEmailSender
from src.service.cinema.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.cinema.app.template import email_template


class SendBookingConfirmationEmailUseCase:
    def __init__(
        self,
        *,
        booking_query_repo: IBookingQueryRepo,
        user_query_repo: IUserQueryRepo,
        email_sender: IEmailSender,
        frontend_url: str,
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.user_query_repo = user_query_repo
        self.email_sender = email_sender
        self.frontend_url = frontend_url

    @Logger.io
    async def execute(self, *, booking_id: str) -> Dict[str, Any]:
        details = await self.booking_query_repo.get_by_id_with_details(booking_id=booking_id)
        if details is None:
            raise NotFoundError(f'Booking {booking_id} not found')
        if details.show is None or details.movie is None:
            raise NotFoundError(f'Show or movie for booking {booking_id} not found')

        user = await self.user_query_repo.get_by_id(user_id=details.booking.user_id)
        if user is None:
            raise NotFoundError(f'User {details.booking.user_id} not found')

        message = email_template.booking_confirmation(
            to=user.email,
            user_name=user.name,
            movie_title=details.movie.title,
            show_time=details.show.show_date_time,
            seats=details.booking.booked_seats,
            amount=details.booking.amount,
            frontend_url=self.frontend_url,
        )
        try:
            await self.email_sender.send_email(
                to=message.to, subject=message.subject, body=message.body
            )
        except Exception:
            metrics.record_email(kind='booking_confirmation', result='failed')
            raise

        metrics.record_email(kind='booking_confirmation', result='sent')
        return {'sent_to': user.email}
