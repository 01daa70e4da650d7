"""
Celery worker entry point
Consumes the notifications queue (reminders, pickup-ready notices)
"""
import logging
from celery.signals import worker_process_init, worker_ready, worker_shutdown

from salon_scheduling.config.celery_config import celery_app
from salon_scheduling.config.database import engine
from salon_scheduling.utils.my_logging import setup_logging

NOTIFICATION_QUEUE = "notifications"

setup_logging()
logger = logging.getLogger(__name__)


@worker_process_init.connect
def reset_db_pool(**kwargs):
    """Forked children must not reuse the parent's pooled connections"""
    engine.dispose(close=False)


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    notification_tasks = sorted(name for name in celery_app.tasks if ".notification_tasks." in name)
    if not notification_tasks:
        logger.error("No notification tasks registered; check celery include settings")
    logger.info(f"Celery worker ready on '{NOTIFICATION_QUEUE}' with tasks: {notification_tasks}")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("Celery worker shutting down")
    engine.dispose()


if __name__ == "__main__":
    celery_app.start([
        'worker',
        '--loglevel=info',
        f'--queues={NOTIFICATION_QUEUE}',
        '--concurrency=2',
        '--max-tasks-per-child=1000'
    ])
