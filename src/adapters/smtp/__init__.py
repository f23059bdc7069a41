"""Notification adapters - Console and SMTP delivery."""

from .console import ConsoleNotificationGateway
from .mailer import SmtpNotificationGateway

__all__ = ["ConsoleNotificationGateway", "SmtpNotificationGateway"]
