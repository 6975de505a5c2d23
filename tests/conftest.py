"""Shared fixtures for split-buddy tests."""

from unittest.mock import MagicMock

import pytest

from split_buddy.config import Settings
from split_buddy.db import Database
from split_buddy.notifications import NotificationSink
from split_buddy.service import SplitService


@pytest.fixture
def settings(tmp_path):
    """Create settings backed by a temporary directory."""
    return Settings(database_path=tmp_path / "test.db")


@pytest.fixture
def db(settings):
    """Create a temporary database."""
    database = Database(settings.database_path)
    yield database
    database.close()


@pytest.fixture
def notifier():
    """Create a mock notification sink."""
    return MagicMock(spec=NotificationSink)


@pytest.fixture
def service(settings, db, notifier):
    """Create a SplitService instance."""
    return SplitService(settings, db, notifier)
