from celery import Celery
from kombu import Exchange, Queue

from rememberme.core.config import settings


broker_url = settings.CELERY_BROKER_URL or settings.RABBITMQ_URL
result_backend = settings.CELERY_RESULT_BACKEND or None

celery_app = Celery(
    "notifications",
    broker=broker_url,
    backend=result_backend,
)

exchange = Exchange(settings.RABBITMQ_EXCHANGE, type="direct", durable=True)

# Only the output queue lives here; the push/email worker consuming it is a separate service
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_queues=(
        Queue(
            settings.RABBITMQ_OUTPUT_QUEUE,
            exchange=exchange,
            routing_key=settings.RABBITMQ_OUTPUT_ROUTING_KEY,
            durable=True,
        ),
    ),
)
