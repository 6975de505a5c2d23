"""Tests for notification sinks."""

import logging

from split_buddy.notifications import (
    DisabledNotificationSink,
    LoggingNotificationSink,
    NotificationType,
)


class TestNotificationType:
    """Tests for message templates."""

    def test_render_expense_added(self):
        message = NotificationType.EXPENSE_ADDED.render("bob", 12.5, "Trip")

        assert message == "Hi bob, you owe 12.50 for a new expense in 'Trip'."

    def test_render_group_created(self):
        message = NotificationType.GROUP_CREATED.render("Trip", "alice@example.com")

        assert "'Trip'" in message
        assert "alice@example.com" in message


class TestLoggingNotificationSink:
    """Tests for the logging sink."""

    def test_logs_rendered_message(self, caplog):
        with caplog.at_level(logging.INFO, logger="split_buddy.notifications"):
            LoggingNotificationSink().notify_user(
                NotificationType.MEMBER_ADDED,
                "dave@example.com",
                "dave",
                "Trip",
                "alice",
            )

        assert "dave@example.com" in caplog.text
        assert "Hi dave, you were added to the group 'Trip' by alice." in caplog.text

    def test_bad_arguments_only_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="split_buddy.notifications"):
            LoggingNotificationSink().notify_user(
                NotificationType.EXPENSE_ADDED, "bob@example.com", "bob"
            )

        assert "Could not render EXPENSE_ADDED" in caplog.text

    def test_unformattable_amount_only_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="split_buddy.notifications"):
            LoggingNotificationSink().notify_user(
                NotificationType.EXPENSE_ADDED, "bob@example.com", "bob", None, "Trip"
            )

        assert "Could not render EXPENSE_ADDED for bob@example.com" in caplog.text


class TestDisabledNotificationSink:
    """Tests for the disabled sink."""

    def test_logs_nothing_at_info(self, caplog):
        with caplog.at_level(logging.INFO, logger="split_buddy.notifications"):
            DisabledNotificationSink().notify_user(
                NotificationType.GROUP_CREATED, "bob@example.com", "Trip", "alice"
            )

        assert caplog.text == ""
