# salon_scheduling/utils/my_logging.py
"""Logging configuration shared by the API process and the Celery worker"""
import logging
import sys
from salon_scheduling.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that are chatty at INFO and only interesting when they fail
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "alembic",
    "celery",
    "kombu",
    "uvicorn.access",
)


def setup_logging(verbose=True):
    """
    Configure root logging to stdout.

    verbose: use LOG_LEVEL from settings; otherwise WARNING with the noisy
    libraries raised to ERROR.
    """
    settings = get_settings()

    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.ERROR)

    logging.getLogger(__name__).debug(f"Logging configured at {logging.getLevelName(level)}")
