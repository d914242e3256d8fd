class NotificationError(Exception):
    """Base class for notification scheduling errors."""


class InvalidPreferences(NotificationError):
    """Preferences rejected by validation (timezone, intervals, count)."""


class PreferencesNotFound(NotificationError):
    pass


class PreferencesAlreadyExist(NotificationError):
    pass


class DeliveryFailed(NotificationError):
    """The delivery collaborator could not hand off a reminder."""

    def __init__(self, user_id: str, reason: str = ""):
        self.user_id = user_id
        self.reason = reason
        super().__init__(f"delivery failed for user {user_id}: {reason}" if reason else f"delivery failed for user {user_id}")


class RecordNotFound(NotificationError):
    """Schedule disappeared between the due query and processing."""


class MalformedStoredSchedule(NotificationError):
    """Persisted schedule state that cannot be used as-is."""
