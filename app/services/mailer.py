"""Account mail rendering and delivery."""

import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from app.config import Settings, get_settings
from app.errors import MailDeliveryError

logger = logging.getLogger("microblog")

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "mail"


@dataclass
class OutgoingMail:
    """A rendered message ready for delivery."""

    to: str
    subject: str
    body: str
    sender: str


class UserMailer:
    """Renders activation and password reset mail and hands it to the configured backend."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self.backend = self.settings.MAIL_BACKEND
        self.outbox: list[OutgoingMail] = []
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def account_activation(self, user) -> OutgoingMail:
        """Send the account activation link to a freshly created user."""
        base_url = self.settings.APP_BASE_URL.rstrip("/")
        activation_url = f"{base_url}/api/v1/account-activations/{user.activation_token}?email={quote(user.email)}"
        body = self._render("account_activation.txt", user=user, activation_url=activation_url)
        return self.deliver(
            OutgoingMail(to=user.email, subject="Account activation", body=body, sender=self.settings.MAIL_FROM)
        )

    def password_reset(self, user) -> OutgoingMail:
        """Send the password reset link."""
        base_url = self.settings.APP_BASE_URL.rstrip("/")
        reset_url = f"{base_url}/api/v1/password-resets/{user.reset_token}?email={quote(user.email)}"
        body = self._render(
            "password_reset.txt",
            user=user,
            reset_url=reset_url,
            expire_hours=self.settings.PASSWORD_RESET_EXPIRE_HOURS,
        )
        return self.deliver(
            OutgoingMail(to=user.email, subject="Password reset", body=body, sender=self.settings.MAIL_FROM)
        )

    def _render(self, template_name: str, **context) -> str:
        return self._env.get_template(template_name).render(**context)

    def deliver(self, mail: OutgoingMail) -> OutgoingMail:
        """Deliver a message. Raises MailDeliveryError on failure."""
        if self.backend == "memory":
            self.outbox.append(mail)
        elif self.backend == "smtp":
            self._send_smtp(mail)
        else:
            logger.info("MAIL to=%s subject=%r\n%s", mail.to, mail.subject, mail.body)
        logger.info("Delivered '%s' mail to %s via %s", mail.subject, mail.to, self.backend)
        return mail

    def _send_smtp(self, mail: OutgoingMail) -> None:
        message = MIMEText(mail.body, "plain", "utf-8")
        message["Subject"] = mail.subject
        message["From"] = mail.sender
        message["To"] = mail.to

        try:
            with smtplib.SMTP(self.settings.SMTP_HOST, self.settings.SMTP_PORT, timeout=30) as server:
                server.starttls()
                if self.settings.SMTP_USERNAME:
                    server.login(self.settings.SMTP_USERNAME, self.settings.SMTP_PASSWORD)
                server.sendmail(mail.sender, [mail.to], message.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send '%s' mail to %s: %s", mail.subject, mail.to, e)
            raise MailDeliveryError(f"Could not deliver mail to {mail.to}") from e


_mailer: UserMailer | None = None


def get_mailer() -> UserMailer:
    """Get singleton mailer instance."""
    global _mailer
    if _mailer is None:
        _mailer = UserMailer()
    return _mailer
