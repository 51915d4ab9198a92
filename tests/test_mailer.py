"""Tests for account mail rendering and delivery."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.orm import Session

from app.config import Settings
from app.errors import MailDeliveryError
from app.models.user import User
from app.services.mailer import OutgoingMail, UserMailer


class TestRendering:
    """Tests for the rendered messages."""

    def test_account_activation(self, db_session: Session, mailer: UserMailer):
        """The activation mail carries the token and the encoded email."""
        user = User(name="Ann", email="ann@example.com", password="secret1")
        user.save(db_session)

        user.send_activation_email(mailer)

        assert len(mailer.outbox) == 1
        mail = mailer.outbox[0]
        assert mail.to == "ann@example.com"
        assert mail.subject == "Account activation"
        assert "Hi Ann," in mail.body
        assert f"/api/v1/account-activations/{user.activation_token}?email=ann%40example.com" in mail.body

    def test_password_reset(self, db_session: Session, user: User, mailer: UserMailer):
        """The reset mail carries the token and the expiry window."""
        token = user.create_reset_digest(db_session)

        user.send_password_reset_email(mailer)

        mail = mailer.outbox[-1]
        assert mail.subject == "Password reset"
        assert f"/api/v1/password-resets/{token}?email=michael%40example.com" in mail.body
        assert "expire in 2 hours" in mail.body

    def test_activation_needs_resident_token(self, user: User, mailer: UserMailer):
        """A user loaded from the store has no activation token to send."""
        user.activation_token = None
        with pytest.raises(ValueError):
            user.send_activation_email(mailer)
        assert mailer.outbox == []

    def test_reset_needs_resident_token(self, user: User, mailer: UserMailer):
        """Reset mail cannot be sent before a reset token was issued."""
        with pytest.raises(ValueError):
            user.send_password_reset_email(mailer)


class TestDelivery:
    """Tests for the delivery backends."""

    def _mail(self) -> OutgoingMail:
        return OutgoingMail(to="ann@example.com", subject="Hello", body="Body", sender="noreply@example.com")

    def test_console_backend_logs(self, caplog):
        """The console backend writes the message to the log."""
        settings = Settings()
        settings.MAIL_BACKEND = "console"
        mailer = UserMailer(settings)

        with caplog.at_level("INFO", logger="microblog"):
            mailer.deliver(self._mail())

        assert "ann@example.com" in caplog.text
        assert mailer.outbox == []

    @patch("app.services.mailer.smtplib.SMTP")
    def test_smtp_backend_sends(self, mock_smtp):
        """The smtp backend logs in and sends."""
        settings = Settings()
        settings.MAIL_BACKEND = "smtp"
        settings.SMTP_HOST = "smtp.example.com"
        settings.SMTP_USERNAME = "mailer"
        settings.SMTP_PASSWORD = "secret"
        server = MagicMock()
        mock_smtp.return_value.__enter__.return_value = server

        UserMailer(settings).deliver(self._mail())

        mock_smtp.assert_called_once_with("smtp.example.com", settings.SMTP_PORT, timeout=30)
        server.login.assert_called_once_with("mailer", "secret")
        server.sendmail.assert_called_once()

    @patch("app.services.mailer.smtplib.SMTP")
    def test_smtp_failure_raises(self, mock_smtp):
        """SMTP errors surface as MailDeliveryError."""
        settings = Settings()
        settings.MAIL_BACKEND = "smtp"
        settings.SMTP_HOST = "smtp.example.com"
        mock_smtp.side_effect = smtplib.SMTPConnectError(421, b"unavailable")

        with pytest.raises(MailDeliveryError):
            UserMailer(settings).deliver(self._mail())
