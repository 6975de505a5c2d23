"""Custom exceptions for split-buddy."""


class SplitBuddyError(Exception):
    """Base exception for all split-buddy errors."""

    pass


class ConfigurationError(SplitBuddyError):
    """Raised when configuration is invalid or missing."""

    pass


class InvalidInputError(SplitBuddyError):
    """Raised when an expense request is structurally malformed."""

    pass


class InvalidDataError(SplitBuddyError):
    """Base class for service-level data errors."""

    pass


class GroupNotFoundError(InvalidDataError):
    """Raised when a group does not exist or has been deleted."""

    def __init__(self, group_id: str, message: str | None = None):
        self.group_id = group_id
        super().__init__(message or f"Group {group_id} not found")


class NotAMemberError(InvalidDataError):
    """Raised when a user is not an active member of a group."""

    def __init__(self, email: str, group_id: str, message: str | None = None):
        self.email = email
        self.group_id = group_id
        super().__init__(
            message or f"{email} is not an active member of group {group_id}"
        )


class NotAdminError(InvalidDataError):
    """Raised when a user is not an admin of a group."""

    def __init__(self, email: str, group_id: str, message: str | None = None):
        self.email = email
        self.group_id = group_id
        super().__init__(message or f"{email} is not an admin of group {group_id}")
