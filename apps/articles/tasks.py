"""
Celery tasks for the article lifecycle.
"""

import logging

from celery import shared_task

from .sweep import run_sweep

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2)
def run_lifecycle_sweep(self, trigger: str = 'beat'):
    """
    Daily sweep, scheduled through Celery beat.

    Per-article failures are absorbed by the sweep itself; a retry only
    happens when the run as a whole could not start, e.g. the database
    was unreachable.
    """
    try:
        stats = run_sweep(trigger=trigger)
    except Exception as exc:
        logger.error("Lifecycle sweep task failed: %s", exc)
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    return stats.to_dict()
