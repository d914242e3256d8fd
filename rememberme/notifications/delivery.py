"""
Delivery collaborators. The scheduler only hands reminders off; transport lives elsewhere.
"""
import logging
import uuid
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict

from rememberme.core.config import DeliveryBackend, settings

from .exceptions import DeliveryFailed
from .notes import ReminderContent

logger = logging.getLogger(__name__)


class NotificationSender:
    """Interface: raise DeliveryFailed when the reminder could not be handed off."""

    def send(self, user_id: str, content: ReminderContent) -> None:
        raise NotImplementedError


def build_payload(user_id: str, content: ReminderContent) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "notification_id": str(uuid.uuid4()),
        "payload": {
            "title": settings.NOTIFICATION_TITLE,
            "message": content.text,
            "source": content.source,
            "note_id": content.note_id,
        },
        "timestamp": datetime.now(dt_timezone.utc).isoformat(),
    }


class LoggingSender(NotificationSender):
    def send(self, user_id: str, content: ReminderContent) -> None:
        logger.info(f"📬 [Delivery] Notification for user {user_id}: \"{content.text}\" - Source: {content.source}")


class CelerySender(NotificationSender):
    """Publishes the reminder onto the output queue for the push worker."""

    def __init__(self, app=None):
        if app is None:
            from .celery_app import celery_app as app
        self.app = app

    def send(self, user_id: str, content: ReminderContent) -> None:
        payload = build_payload(user_id, content)
        try:
            self.app.send_task(
                "notifications.dispatch",
                args=[payload],
                queue=settings.RABBITMQ_OUTPUT_QUEUE,
                routing_key=settings.RABBITMQ_OUTPUT_ROUTING_KEY,
            )
        except Exception as e:
            raise DeliveryFailed(user_id, reason=f"publish_failed: {e!r}") from e
        logger.debug(f"[Delivery] Queued notification {payload['notification_id']} for user {user_id}")


def get_sender(backend: DeliveryBackend = None) -> NotificationSender:
    backend = backend or settings.DELIVERY_BACKEND
    if backend == DeliveryBackend.CELERY:
        return CelerySender()
    return LoggingSender()
