"""
Console notification adapter - Implements NotificationGateway protocol.

This module provides a console-based implementation of the domain's
notification port, logging activation codes for local development.
"""

import logging

from src.domain.ports import NotificationPurpose

logger = logging.getLogger(__name__)


class ConsoleNotificationGateway:
    """
    Implements NotificationGateway protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    For demo/development purposes - never fails to deliver.
    """

    def send(
        self,
        address: str,
        display_name: str,
        code: str,
        purpose: NotificationPurpose,
        subject_line: str,
        action_url: str | None = None,
    ) -> None:
        """
        Log the activation code (simulates email delivery).

        The code is logged at INFO level to be visible in docker-compose logs.
        """
        logger.info(
            "[%s] To: %s <%s> Subject: %s Code: %s URL: %s",
            purpose.value.upper(),
            display_name,
            address,
            subject_line,
            code,
            action_url,
        )
