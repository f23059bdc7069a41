"""
SMTP notification adapter - Implements NotificationGateway protocol.

Renders a plain-text message per NotificationPurpose and delivers it with
smtplib. Transport failures are raised as NotificationDeliveryError; no
retries are attempted.
"""

import logging
import smtplib
from email.message import EmailMessage

from src.domain.exceptions import NotificationDeliveryError
from src.domain.ports import NotificationPurpose

logger = logging.getLogger(__name__)

_TEMPLATES = {
    NotificationPurpose.ACTIVATE_ACCOUNT: (
        "Hello {display_name},\n"
        "\n"
        "Your account activation code is: {code}\n"
        "\n"
        "Enter it at {action_url} within the next {ttl_minutes} minutes.\n"
    ),
}


class SmtpNotificationGateway:
    """Implements NotificationGateway protocol via an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str = "",
        password: str = "",
        timeout: float = 10.0,
        code_ttl_minutes: int = 15,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout
        self._code_ttl_minutes = code_ttl_minutes

    def send(
        self,
        address: str,
        display_name: str,
        code: str,
        purpose: NotificationPurpose,
        subject_line: str,
        action_url: str | None = None,
    ) -> None:
        message = self.build_message(address, display_name, code, purpose, subject_line, action_url)
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
                if self._username:
                    smtp.starttls()
                    smtp.login(self._username, self._password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationDeliveryError(f"Could not deliver {purpose.value} message") from e
        logger.info("Sent %s message to %s", purpose.value, address)

    def build_message(
        self,
        address: str,
        display_name: str,
        code: str,
        purpose: NotificationPurpose,
        subject_line: str,
        action_url: str | None = None,
    ) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = address
        message["Subject"] = subject_line
        message.set_content(
            _TEMPLATES[purpose].format(
                display_name=display_name,
                code=code,
                action_url=action_url or "",
                ttl_minutes=self._code_ttl_minutes,
            )
        )
        return message
