# src/services/emailer.py

"""Notification sinks: SMTP email, or the log when SMTP is unset.

SMTP supports STARTTLS (587) or implicit SSL (465).
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from src.config.settings import Settings
from src.models.errors import NotifyFailure

logger = logging.getLogger("price_watch.emailer")

_SMTP_TIMEOUT = 30


class SmtpEmailSink:
    """Sends messages through an SMTP relay, with an optional HTML part."""

    def __init__(
        self,
        server: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        from_email: str | None = None,
        from_name: str | None = None,
    ) -> None:
        self.server = server or Settings.SMTP_SERVER
        self.port = port or Settings.SMTP_PORT
        self.username = username or Settings.SMTP_USERNAME
        self.password = password or Settings.SMTP_PASSWORD
        self.from_email = from_email or Settings.FROM_EMAIL
        self.from_name = from_name or Settings.FROM_NAME

    def _build_message(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")
        return msg

    def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> None:
        """Deliver one message.

        Raises:
            NotifyFailure: on any SMTP or socket error.
        """
        msg = self._build_message(recipient, subject, body, html_body)
        context = ssl.create_default_context()
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(
                    self.server,
                    self.port,
                    timeout=_SMTP_TIMEOUT,
                    context=context,
                ) as smtp:
                    smtp.login(self.username, self.password)
                    smtp.send_message(msg)
            else:
                with smtplib.SMTP(
                    self.server, self.port, timeout=_SMTP_TIMEOUT,
                ) as smtp:
                    smtp.starttls(context=context)
                    smtp.login(self.username, self.password)
                    smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotifyFailure(
                f"SMTP delivery to {recipient} failed: {exc}"
            ) from exc
        logger.info("Email sent to %s: %s", recipient, subject)


class LogSink:
    """Writes messages to the log instead of sending them."""

    def send(
        self,
        recipient: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> None:
        logger.warning(
            "SMTP not configured; alert for %s not emailed.\n%s\n%s",
            recipient,
            subject,
            body,
        )


def build_sink() -> SmtpEmailSink | LogSink:
    """Choose the SMTP sink when credentials are configured."""
    if Settings.smtp_configured():
        return SmtpEmailSink()
    logger.info("SMTP credentials missing, alerts go to the log")
    return LogSink()
