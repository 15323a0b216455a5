from unittest.mock import MagicMock, patch

import pytest

from src.service.cinema.driven_adapter.email.smtp_email_sender import SmtpEmailSender


def _make_sender(username: str = 'relay-user') -> SmtpEmailSender:
    return SmtpEmailSender(
        host='smtp.test',
        port=587,
        username=username,
        password='relay-pass',
        sender='no-reply@movies.example.com',
    )


@pytest.mark.unit
class TestSmtpEmailSender:
    @pytest.fixture
    def smtp(self):
        with patch(
            'src.service.cinema.driven_adapter.email.smtp_email_sender.smtplib.SMTP'
        ) as smtp_cls:
            yield smtp_cls

    @pytest.mark.asyncio
    async def test_sends_html_message_over_starttls(self, smtp):
        # Arrange
        server = MagicMock()
        smtp.return_value.__enter__.return_value = server

        # Act
        await _make_sender().send_email(
            to='ada@example.com', subject='Hello', body='<p>Hi Ada</p>'
        )

        # Assert
        smtp.assert_called_once_with('smtp.test', 587, timeout=30.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with('relay-user', 'relay-pass')
        message = server.send_message.call_args.args[0]
        assert message['To'] == 'ada@example.com'
        assert message['From'] == 'no-reply@movies.example.com'
        assert message['Subject'] == 'Hello'
        assert message.get_body(preferencelist=('html',)).get_content().strip() == (
            '<p>Hi Ada</p>'
        )

    @pytest.mark.asyncio
    async def test_skips_login_without_username(self, smtp):
        # Arrange
        server = MagicMock()
        smtp.return_value.__enter__.return_value = server

        # Act
        await _make_sender(username='').send_email(to='ada@example.com', subject='S', body='B')

        # Assert
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    @pytest.mark.asyncio
    async def test_relay_error_propagates(self, smtp):
        # Arrange
        server = MagicMock()
        server.send_message.side_effect = OSError('relay refused')
        smtp.return_value.__enter__.return_value = server

        # Act & Assert
        with pytest.raises(OSError, match='relay refused'):
            await _make_sender().send_email(to='ada@example.com', subject='S', body='B')
