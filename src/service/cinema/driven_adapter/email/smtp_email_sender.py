from email.message import EmailMessage
import smtplib

import anyio

from src.platform.logging.loguru_io import Logger
from src.service.cinema.app.interface.i_email_sender import IEmailSender


class SmtpEmailSender(IEmailSender):
    """
    SMTP relay client (STARTTLS + login).

    smtplib is blocking, so each send runs in a worker thread with its own
    connection; concurrent sends never share a socket.
    """

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        timeout_seconds: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.timeout_seconds = timeout_seconds

    def _build_message(self, *, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message['Subject'] = subject
        message['From'] = self.sender
        message['To'] = to
        message.set_content('This message requires an HTML capable mail client.')
        message.add_alternative(body, subtype='html')
        return message

    def _send_blocking(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout_seconds) as server:
            server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(message)

    @Logger.io
    async def send_email(self, *, to: str, subject: str, body: str) -> None:
        message = self._build_message(to=to, subject=subject, body=body)
        await anyio.to_thread.run_sync(self._send_blocking, message)
        Logger.base.info(f'📧 [EMAIL] Sent "{subject}" to {to}')
