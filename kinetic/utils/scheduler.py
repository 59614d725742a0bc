"""
Background scheduler for automated tasks.

Handles:
- Retention batch: churn scoring and win-back campaigns (daily at 10 AM UTC)
"""
import os
import atexit
import logging
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = logging.getLogger(__name__)

# Global scheduler instance
_scheduler = None
_flask_app = None  # Store Flask app reference for context

# Set on shutdown so an in-flight batch stops between members
_cancel_event = threading.Event()

RETENTION_JOB_ID = 'retention_batch'


def init_scheduler(app):
    """
    Initialize the background scheduler.

    Only runs in production or when ENABLE_SCHEDULER=true.
    Only the main gunicorn process should run the scheduler.
    """
    global _scheduler, _flask_app

    _flask_app = app

    if app.config.get('TESTING'):
        logger.debug('[Scheduler] Disabled in testing mode')
        return

    if not (os.getenv('FLASK_ENV') == 'production' or os.getenv('ENABLE_SCHEDULER') == 'true'):
        logger.info('[Scheduler] Disabled (set FLASK_ENV=production or ENABLE_SCHEDULER=true)')
        return

    # Prevent multiple scheduler instances (important for gunicorn workers)
    if os.getenv('SCHEDULER_RUNNING') == 'true':
        logger.info('[Scheduler] Already running in another process')
        return

    try:
        _scheduler = BackgroundScheduler(
            timezone='UTC',
            job_defaults={
                'coalesce': True,  # Combine missed runs
                'max_instances': 1,  # Prevent concurrent runs
                'misfire_grace_time': 3600  # 1 hour grace period
            }
        )

        # Retention batch - Daily at 10 AM UTC
        _scheduler.add_job(
            run_retention_job,
            trigger=CronTrigger(hour=10, minute=0),
            id=RETENTION_JOB_ID,
            name='Score members and send win-back campaigns',
            replace_existing=True
        )

        _scheduler.start()
        os.environ['SCHEDULER_RUNNING'] = 'true'
        logger.info('[Scheduler] Started: retention batch daily at 10:00 UTC')

        atexit.register(shutdown_scheduler)

    except Exception as e:
        logger.error(f'[Scheduler] Failed to initialize: {e}')


def shutdown_scheduler():
    """Gracefully shutdown the scheduler."""
    global _scheduler
    _cancel_event.set()
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info('[Scheduler] Shutdown complete')


def run_retention_job():
    """
    Run the retention batch for all active members.
    """
    if not _flask_app:
        logger.error('[Scheduler] Flask app not initialized')
        return None

    logger.info('[Scheduler] Starting retention batch...')

    with _flask_app.app_context():
        from ..services.retention_orchestrator import run_retention_batch
        try:
            results = run_retention_batch(cancel_event=_cancel_event)
        except Exception as e:
            logger.error(f'[Scheduler] Retention batch failed: {e}')
            return None

        logger.info(
            f"[Scheduler] Retention batch complete: {results['processed']} processed, "
            f"{results['campaigns_triggered']} campaigns, {results['failed']} failed"
        )
        return results
