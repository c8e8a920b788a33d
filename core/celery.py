from celery import Celery
from celery.signals import setup_logging

from core.config import settings
from core.logging import configure_logging

EMAIL_QUEUE = "emails"

celery_app = Celery(
    "storefront",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["tasks.email_tasks"],
)

# Order confirmations are the only background work; keep them on their own queue
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=60 * 60,
    timezone="America/Bogota",
    enable_utc=True,
    task_default_queue=EMAIL_QUEUE,
    task_routes={"tasks.email_tasks.*": {"queue": EMAIL_QUEUE}},
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
    broker_connection_retry_on_startup=True,
)


@setup_logging.connect
def _configure_worker_logging(**kwargs):
    # Worker records go through the same JSON handler as the API
    configure_logging()
