"""Fire-and-forget member notifications."""

import logging
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationType(Enum):
    """Notification kinds and their message templates."""

    GROUP_CREATED = "Hi, you were added to the group '{}' by {}."
    MEMBER_ADDED = "Hi {}, you were added to the group '{}' by {}."
    EXPENSE_ADDED = "Hi {}, you owe {:.2f} for a new expense in '{}'."

    def render(self, *args: Any) -> str:
        """Fill the template with positional arguments."""
        return self.value.format(*args)


class NotificationSink(Protocol):
    """Anything that can deliver a notification to a user."""

    def notify_user(
        self, notification_type: NotificationType, recipient: str, *args: Any
    ) -> None: ...


class LoggingNotificationSink:
    """Notification sink that writes each message to the log."""

    def notify_user(
        self, notification_type: NotificationType, recipient: str, *args: Any
    ) -> None:
        """Log a rendered notification for ``recipient``."""
        try:
            message = notification_type.render(*args)
        except (IndexError, ValueError, TypeError) as e:
            logger.warning(
                f"Could not render {notification_type.name} for {recipient}: {e}"
            )
            return

        logger.info(f"Notify {recipient} [{notification_type.name}]: {message}")


class DisabledNotificationSink:
    """Notification sink that drops everything."""

    def notify_user(
        self, notification_type: NotificationType, recipient: str, *args: Any
    ) -> None:
        logger.debug(f"Notifications disabled, dropped {notification_type.name}")
