import smtplib
from unittest.mock import MagicMock, patch

from sietch.tasks import email_sender
from sietch.tasks.email_sender import build_message, deliver, send_email


class TestBuildMessage:
    def test_headers_and_body(self):
        with patch.object(email_sender.settings, "smtp_from", "sietch@example.com"):
            message = build_message("member@example.com", "Group closed", "Rate your squad")
        assert message["From"] == "sietch@example.com"
        assert message["To"] == "member@example.com"
        assert message["Subject"] == "Group closed"
        assert message.get_content().strip() == "Rate your squad"


class TestDeliver:
    def test_skipped_without_smtp_host(self):
        with patch.object(email_sender.settings, "smtp_host", ""), patch(
            "sietch.tasks.email_sender.smtplib.SMTP"
        ) as smtp:
            assert deliver(build_message("a@example.com", "s", "b")) is False
        smtp.assert_not_called()

    def test_starttls_and_login(self):
        server = MagicMock()
        smtp = MagicMock(return_value=server)
        server.__enter__.return_value = server
        with patch.object(email_sender.settings, "smtp_host", "mail.local"), patch.object(
            email_sender.settings, "smtp_port", 587
        ), patch.object(email_sender.settings, "smtp_user", "bot"), patch.object(
            email_sender.settings, "smtp_password", "secret"
        ), patch("sietch.tasks.email_sender.smtplib.SMTP", smtp):
            assert deliver(build_message("a@example.com", "s", "b")) is True
        smtp.assert_called_once_with("mail.local", 587)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot", "secret")
        server.send_message.assert_called_once()

    def test_implicit_tls_port(self):
        server = MagicMock()
        server.__enter__.return_value = server
        smtp_ssl = MagicMock(return_value=server)
        with patch.object(email_sender.settings, "smtp_host", "mail.local"), patch.object(
            email_sender.settings, "smtp_port", 465
        ), patch.object(email_sender.settings, "smtp_user", ""), patch(
            "sietch.tasks.email_sender.smtplib.SMTP_SSL", smtp_ssl
        ):
            assert deliver(build_message("a@example.com", "s", "b")) is True
        smtp_ssl.assert_called_once_with("mail.local", 465)
        server.starttls.assert_not_called()
        server.login.assert_not_called()


async def test_send_failure_is_swallowed():
    with patch(
        "sietch.tasks.email_sender.deliver",
        side_effect=smtplib.SMTPServerDisconnected("gone"),
    ):
        await send_email("a@example.com", "subject", "body")
