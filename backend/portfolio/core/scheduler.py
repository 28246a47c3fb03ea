"""
Background scheduler for periodic tasks.

This module manages background jobs that run on a schedule:
- Purge expired sessions: runs every SESSION_CLEANUP_MINUTES
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from portfolio.core.config import settings
from portfolio.services.session_store import SessionStore, session_store
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def purge_expired_sessions_job(store: SessionStore = session_store) -> int:
    """
    Remove expired sessions from the store.

    Lookups already ignore expired entries; this job keeps sessions that are
    never looked up again from accumulating.
    """
    removed = store.purge_expired()
    if removed:
        logger.info(f"Session cleanup: removed {removed} expired session(s)")
    else:
        logger.debug("Session cleanup: nothing to remove")
    return removed


def start_scheduler(store: SessionStore = session_store):
    """
    Start the background scheduler.

    Called from the FastAPI lifespan on startup.
    """
    if not scheduler.running:
        scheduler.add_job(
            purge_expired_sessions_job,
            trigger=IntervalTrigger(minutes=settings.SESSION_CLEANUP_MINUTES),
            args=[store],
            id="purge_expired_sessions",
            name="Purge expired sessions",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            f"Background scheduler started. Session cleanup every {settings.SESSION_CLEANUP_MINUTES} minutes."
        )


def stop_scheduler():
    """
    Stop the background scheduler.

    Called from the FastAPI lifespan on shutdown.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
