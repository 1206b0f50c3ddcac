"""Background Worker for RemindMe Service.

Polls the scheduled_jobs table and fires due jobs. Reminder jobs look up the
user and post on the platform and send the reminder as a private message.

The worker:
- Runs continuously, checking for due jobs every WORKER_CHECK_INTERVAL seconds
- Fires each due job once (the row is removed before the handler runs)
- Logs handler failures without retrying
"""

import asyncio
import signal
import sys

import database
from config import settings
from logger_config import setup_logger
from platform_client import PlatformClient
from reminder_job import register_reminder_job
from scheduler import JobScheduler

logger = setup_logger(__name__, 'worker.log')

# Global flag for graceful shutdown
shutdown_requested = False


def signal_handler(signum, frame):
    """Handle shutdown signals gracefully."""
    global shutdown_requested
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    shutdown_requested = True


def build_scheduler() -> JobScheduler:
    """Scheduler with every job handler registered."""
    scheduler = JobScheduler(database.SessionLocal)
    register_reminder_job(scheduler, PlatformClient())
    return scheduler


async def worker_loop():
    """Main worker loop that runs until shutdown is requested."""
    logger.info("Background worker started")
    logger.info(f"Worker enabled: {settings.WORKER_ENABLED}")
    logger.info(f"Check interval: {settings.WORKER_CHECK_INTERVAL} seconds")
    logger.info(f"Platform API URL: {settings.PLATFORM_API_URL}")

    if not settings.WORKER_ENABLED:
        logger.warning("Worker is disabled in configuration. Exiting.")
        return

    database.init_db()
    scheduler = build_scheduler()

    iteration = 0
    while not shutdown_requested:
        try:
            iteration += 1
            logger.debug(f"Worker iteration {iteration} started")

            fired = await scheduler.run_due_jobs()
            if fired:
                logger.info(f"Fired {fired} job(s) in iteration {iteration}")

            # Sleep in 1-second steps to allow quick shutdown
            for _ in range(settings.WORKER_CHECK_INTERVAL):
                if shutdown_requested:
                    break
                await asyncio.sleep(1)

        except Exception as e:
            logger.error(f"Error in worker loop iteration {iteration}: {str(e)}", exc_info=True)
            await asyncio.sleep(5)  # Brief pause before retrying

    logger.info("Background worker shutting down gracefully")


def main():
    """Main entry point for the background worker."""
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    logger.info("=" * 60)
    logger.info("RemindMe Service - Background Worker")
    logger.info("=" * 60)

    try:
        asyncio.run(worker_loop())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    except Exception as e:
        logger.error(f"Fatal error in background worker: {str(e)}", exc_info=True)
        sys.exit(1)

    logger.info("Background worker stopped")
    sys.exit(0)


if __name__ == "__main__":
    main()
