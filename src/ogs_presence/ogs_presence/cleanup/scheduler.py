from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..core.constants import DEFAULT_CLEANUP_HOUR, DEFAULT_CLEANUP_MINUTE
from .service import StaleSessionReconciler

logger = logging.getLogger(__name__)

JOB_ID = "stale_session_cleanup"


def _run(reconciler: StaleSessionReconciler) -> None:
    try:
        results = reconciler.run_all()
    except Exception:
        logger.exception("scheduled cleanup failed")
        return
    for name, result in results.items():
        if not result.success:
            logger.warning("scheduled %s cleanup finished with %d error(s)", name, len(result.errors))


def start_cleanup_scheduler(
    reconciler: StaleSessionReconciler,
    *,
    hour: int = DEFAULT_CLEANUP_HOUR,
    minute: int = DEFAULT_CLEANUP_MINUTE,
) -> BackgroundScheduler:
    """Run the reconciler once a night in a background thread."""
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        _run,
        trigger=CronTrigger(hour=hour, minute=minute),
        args=[reconciler],
        id=JOB_ID,
        name="Close stale attendance and work sessions",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info("cleanup scheduler started (daily at %02d:%02d)", hour, minute)
    return scheduler
