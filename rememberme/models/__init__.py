from .note import Note
from .notification_preferences import NotificationPreferences
