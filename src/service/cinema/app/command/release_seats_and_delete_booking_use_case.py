from datetime import datetime, timedelta
from typing import Any, Dict

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.workflow.step_context import IStepContext
from src.service.cinema.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema.app.interface.i_show_command_repo import IShowCommandRepo
from src.service.cinema.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.cinema.domain.seat_release_domain import release_seats


class ReleaseSeatsAndDeleteBookingUseCase:
    """
    Payment timeout for a booking.

    Flow:
    1. Sleep (durably) until the payment window after the request has passed
    2. One memoized step:
       - booking gone or paid -> nothing to do
       - otherwise drop its seats from the show and delete the booking

    The step is safe to re-run after a partial failure: only seats still held
    by the booking's user are freed, so a seat re-booked by someone else in
    between stays taken, and deleting a deleted booking is a success.
    """

    WAIT_STEP = 'wait-for-10-minutes'
    CHECK_STEP = 'check-payment-status'

    def __init__(
        self,
        *,
        booking_query_repo: IBookingQueryRepo,
        booking_command_repo: IBookingCommandRepo,
        show_query_repo: IShowQueryRepo,
        show_command_repo: IShowCommandRepo,
        payment_window: timedelta,
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.booking_command_repo = booking_command_repo
        self.show_query_repo = show_query_repo
        self.show_command_repo = show_command_repo
        self.payment_window = payment_window

    @Logger.io
    async def execute(
        self, *, booking_id: str, requested_at: datetime, step: IStepContext
    ) -> Dict[str, Any]:
        await step.sleep_until(self.WAIT_STEP, requested_at + self.payment_window)
        return await step.run(
            self.CHECK_STEP, lambda: self.release_if_unpaid(booking_id=booking_id)
        )

    @Logger.io
    async def release_if_unpaid(self, *, booking_id: str) -> Dict[str, Any]:
        booking = await self.booking_query_repo.get_by_id(booking_id=booking_id)
        if booking is None:
            return {'released': False, 'reason': 'booking_not_found'}
        if booking.is_paid:
            return {'released': False, 'reason': 'paid'}

        show = await self.show_query_repo.get_by_id(show_id=booking.show_id)
        if show is None:
            raise NotFoundError(f'Show {booking.show_id} for booking {booking_id} not found')

        remaining = release_seats(show.occupied_seats, booking.booked_seats, booking.user_id)
        held = [seat for seat in show.occupied_seats if seat not in remaining]
        freed = 0
        if held:
            freed = await self.show_command_repo.release_seats(
                show_id=show.id, seats=held, holder_id=booking.user_id
            )

        await self.booking_command_repo.delete(booking_id=booking_id)
        metrics.record_booking_expired(seats_released=freed)
        Logger.base.info(f'🪑 [EXPIRY] Booking {booking_id} expired, {freed} seat(s) released')
        return {'released': True, 'seats_released': freed}
