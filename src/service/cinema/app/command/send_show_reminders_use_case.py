from datetime import datetime, timedelta
from typing import Any, Dict, List

import anyio

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.platform.workflow.step_context import IStepContext
from src.service.cinema.app.interface.i_email_sender import IEmailSender
from src.service.cinema.app.interface.i_show_query_repo import IShowQueryRepo
from src.service.cinema.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.cinema.app.template import email_template
from src.service.cinema.domain.value_object.reminder_task import ReminderTask


class SendShowRemindersUseCase:
    """
    Reminder sweep, fired every `lead_time`.

    Shows starting in [now + lead_time - window, now + lead_time] get one
    reminder per seat holder. Sends run concurrently and each outcome is kept
    independently: one failed send never cancels or rolls back the others.
    """

    PREPARE_STEP = 'prepare-reminder-tasks'
    SEND_STEP = 'send-all-reminders'

    def __init__(
        self,
        *,
        show_query_repo: IShowQueryRepo,
        user_query_repo: IUserQueryRepo,
        email_sender: IEmailSender,
        lead_time: timedelta,
        window: timedelta,
    ) -> None:
        self.show_query_repo = show_query_repo
        self.user_query_repo = user_query_repo
        self.email_sender = email_sender
        self.lead_time = lead_time
        self.window = window

    @Logger.io
    async def execute(self, *, now: datetime, step: IStepContext) -> Dict[str, Any]:
        window_end = now + self.lead_time
        window_start = window_end - self.window

        tasks = await step.run(
            self.PREPARE_STEP,
            lambda: self.prepare_tasks(window_start=window_start, window_end=window_end),
        )
        if not tasks:
            return {'sent': 0, 'message': 'No reminders to send.'}

        outcomes = await step.run(self.SEND_STEP, lambda: self.send_all(tasks=tasks))
        sent = sum(1 for outcome in outcomes if outcome['status'] == 'fulfilled')
        failed = len(outcomes) - sent
        return {
            'sent': sent,
            'failed': failed,
            'message': f'Sent {sent} reminder(s), {failed} failed.',
        }

    @Logger.io
    async def prepare_tasks(
        self, *, window_start: datetime, window_end: datetime
    ) -> List[Dict[str, Any]]:
        shows = await self.show_query_repo.list_starting_between_with_movie(
            start=window_start, end=window_end
        )

        tasks: List[Dict[str, Any]] = []
        for details in shows:
            if details.movie is None or not details.show.occupied_seats:
                continue

            users = await self.user_query_repo.list_by_ids(
                user_ids=details.show.seat_holder_ids
            )
            tasks.extend(
                ReminderTask(
                    user_email=user.email,
                    user_name=user.name,
                    movie_title=details.movie.title,
                    show_time=details.show.show_date_time,
                ).to_dict()
                for user in users
            )
        return tasks

    async def send_all(self, *, tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        outcomes: List[Dict[str, Any]] = [{} for _ in tasks]

        async def _send(index: int, task: ReminderTask) -> None:
            message = email_template.show_reminder(
                to=task.user_email,
                user_name=task.user_name,
                movie_title=task.movie_title,
                show_time=task.show_time,
            )
            try:
                await self.email_sender.send_email(
                    to=message.to, subject=message.subject, body=message.body
                )
                outcomes[index] = {'status': 'fulfilled'}
            except Exception as e:
                Logger.base.warning(f'⚠️  [REMINDER] Send to {task.user_email} failed: {e}')
                outcomes[index] = {'status': 'rejected', 'reason': str(e)}

        async with anyio.create_task_group() as tg:
            for index, data in enumerate(tasks):
                tg.start_soon(_send, index, ReminderTask.from_dict(data))

        sent = sum(1 for outcome in outcomes if outcome['status'] == 'fulfilled')
        metrics.record_email(kind='show_reminder', result='sent', count=sent)
        metrics.record_email(kind='show_reminder', result='failed', count=len(tasks) - sent)
        return outcomes
