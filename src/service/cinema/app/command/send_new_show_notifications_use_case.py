from typing import Any, Dict

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema.app.interface.i_email_sender import IEmailSender
from src.service.cinema.app.interface.i_user_query_repo import IUserQueryRepo
from src.service.cinema.app.template import email_template


class SendNewShowNotificationsUseCase:
    """
    Announce a new show to every user, one e-mail at a time.

    A failed send aborts the remaining ones; the run retries from the start.
    """

    def __init__(
        self,
        *,
        user_query_repo: IUserQueryRepo,
        email_sender: IEmailSender,
        frontend_url: str,
    ) -> None:
        self.user_query_repo = user_query_repo
        self.email_sender = email_sender
        self.frontend_url = frontend_url

    @Logger.io
    async def execute(self, *, movie_title: str, movie_id: str) -> Dict[str, Any]:
        users = await self.user_query_repo.list_all()
        Logger.base.info(f'📣 [NEW-SHOW] Announcing {movie_title} ({movie_id}) to {len(users)} users')

        for user in users:
            message = email_template.new_show_announcement(
                to=user.email,
                user_name=user.name,
                movie_title=movie_title,
                frontend_url=self.frontend_url,
            )
            try:
                await self.email_sender.send_email(
                    to=message.to, subject=message.subject, body=message.body
                )
            except Exception:
                metrics.record_email(kind='new_show', result='failed')
                raise
            metrics.record_email(kind='new_show', result='sent')

        return {'message': 'Notifications sent.'}
