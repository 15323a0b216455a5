"""
Durable function bindings

Maps each event (or cron schedule) to the use case that handles it. Handlers
unpack the event payload; the use cases own the step structure.
"""

from typing import Any, List

import attrs

from src.platform.workflow.durable_function import DurableFunction, FunctionRegistry
from src.platform.workflow.function_run import FunctionEvent
from src.platform.workflow.step_context import IStepContext
from src.service.cinema.app.command.release_seats_and_delete_booking_use_case import (
    ReleaseSeatsAndDeleteBookingUseCase,
)
from src.service.cinema.app.command.send_booking_confirmation_email_use_case import (
    SendBookingConfirmationEmailUseCase,
)
from src.service.cinema.app.command.send_new_show_notifications_use_case import (
    SendNewShowNotificationsUseCase,
)
from src.service.cinema.app.command.send_show_reminders_use_case import SendShowRemindersUseCase
from src.service.cinema.app.command.sync_user_creation_use_case import SyncUserCreationUseCase
from src.service.cinema.app.command.sync_user_deletion_use_case import SyncUserDeletionUseCase
from src.service.cinema.app.command.sync_user_update_use_case import SyncUserUpdateUseCase
from src.service.cinema.domain.app_event import AppEventName, FunctionId


class CinemaFunctions:
    def __init__(
        self,
        *,
        sync_user_creation_use_case: SyncUserCreationUseCase,
        sync_user_update_use_case: SyncUserUpdateUseCase,
        sync_user_deletion_use_case: SyncUserDeletionUseCase,
        release_seats_and_delete_booking_use_case: ReleaseSeatsAndDeleteBookingUseCase,
        send_booking_confirmation_email_use_case: SendBookingConfirmationEmailUseCase,
        send_show_reminders_use_case: SendShowRemindersUseCase,
        send_new_show_notifications_use_case: SendNewShowNotificationsUseCase,
        reminder_interval_hours: int,
    ) -> None:
        self.sync_user_creation_use_case = sync_user_creation_use_case
        self.sync_user_update_use_case = sync_user_update_use_case
        self.sync_user_deletion_use_case = sync_user_deletion_use_case
        self.release_seats_and_delete_booking_use_case = release_seats_and_delete_booking_use_case
        self.send_booking_confirmation_email_use_case = send_booking_confirmation_email_use_case
        self.send_show_reminders_use_case = send_show_reminders_use_case
        self.send_new_show_notifications_use_case = send_new_show_notifications_use_case
        self.reminder_interval_hours = reminder_interval_hours

    # ====== Identity sync =======
    async def sync_user_creation(self, *, event: FunctionEvent, step: IStepContext) -> Any:
        user = await self.sync_user_creation_use_case.execute(payload=event.data)
        return attrs.asdict(user)

    async def sync_user_update(self, *, event: FunctionEvent, step: IStepContext) -> Any:
        return {'updated': await self.sync_user_update_use_case.execute(payload=event.data)}

    async def sync_user_deletion(self, *, event: FunctionEvent, step: IStepContext) -> Any:
        return {'deleted': await self.sync_user_deletion_use_case.execute(payload=event.data)}

    # ====== Booking lifecycle =======
    async def release_seats_delete_booking(
        self, *, event: FunctionEvent, step: IStepContext
    ) -> Any:
        return await self.release_seats_and_delete_booking_use_case.execute(
            booking_id=event.data['bookingId'], requested_at=event.ts, step=step
        )

    # ====== Notifications =======
    async def send_booking_confirmation_email(
        self, *, event: FunctionEvent, step: IStepContext
    ) -> Any:
        return await self.send_booking_confirmation_email_use_case.execute(
            booking_id=event.data['bookingId']
        )

    async def send_show_reminders(self, *, event: FunctionEvent, step: IStepContext) -> Any:
        # Cron runs carry the fire time, so a resumed run sweeps the same window
        return await self.send_show_reminders_use_case.execute(now=event.ts, step=step)

    async def send_new_show_notifications(
        self, *, event: FunctionEvent, step: IStepContext
    ) -> Any:
        return await self.send_new_show_notifications_use_case.execute(
            movie_title=event.data['movieTitle'], movie_id=str(event.data['movieId'])
        )

    def functions(self) -> List[DurableFunction]:
        return [
            DurableFunction(
                function_id=FunctionId.SYNC_USER_CREATION,
                handler=self.sync_user_creation,
                event=AppEventName.CLERK_USER_CREATED,
            ),
            DurableFunction(
                function_id=FunctionId.SYNC_USER_DELETION,
                handler=self.sync_user_deletion,
                event=AppEventName.CLERK_USER_DELETED,
            ),
            DurableFunction(
                function_id=FunctionId.SYNC_USER_UPDATE,
                handler=self.sync_user_update,
                event=AppEventName.CLERK_USER_UPDATED,
            ),
            DurableFunction(
                function_id=FunctionId.RELEASE_SEATS_DELETE_BOOKING,
                handler=self.release_seats_delete_booking,
                event=AppEventName.CHECK_PAYMENT,
            ),
            DurableFunction(
                function_id=FunctionId.SEND_BOOKING_CONFIRMATION_EMAIL,
                handler=self.send_booking_confirmation_email,
                event=AppEventName.SHOW_BOOKED,
            ),
            DurableFunction(
                function_id=FunctionId.SEND_SHOW_REMINDERS,
                handler=self.send_show_reminders,
                cron_interval_hours=self.reminder_interval_hours,
            ),
            DurableFunction(
                function_id=FunctionId.SEND_NEW_SHOW_NOTIFICATIONS,
                handler=self.send_new_show_notifications,
                event=AppEventName.SHOW_ADDED,
            ),
        ]


def build_function_registry(*, cinema_functions: CinemaFunctions) -> FunctionRegistry:
    return FunctionRegistry(cinema_functions.functions())
