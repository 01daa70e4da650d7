"""Celery application setup"""
from celery import Celery

from salon_scheduling.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery app used for notification requests"""
    settings = get_settings()

    app = Celery(
        "salon_scheduling",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["salon_scheduling.tasks.notification_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        task_routes={
            "salon_scheduling.tasks.notification_tasks.*": {"queue": "notifications"},
        },
    )

    return app


celery_app = create_celery_app()
