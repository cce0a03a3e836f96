from celery import Celery

from fitcoach.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "fitcoach_access",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "fitcoach.workers.tasks.access_maintenance",
    ],
)

celery_app.conf.update(
    task_default_queue="q_maintenance",
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
)


@celery_app.task(name="fitcoach.workers.celery_app.ping")
def ping() -> str:
    return "pong"
