"""
Scheduler Driver
================

Runs every sync trigger on its cron schedule with APScheduler and performs a
full sync once at start-up.

Schedules (UTC):
- full sync:          every 12 hours at minute 0
- park status:        every 5 minutes
- wait times:         every 10 minutes
- attraction status:  every 5 minutes
- park locations:     Sundays at 03:00

Overlapping runs of the same job are allowed.

Usage:
    python -m parkfan.scripts.run_scheduler
    python -m parkfan.scripts.run_scheduler --no-initial-sync --create-tables
"""

import argparse
import sys

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from ..database.connection import create_all
from ..utils.logger import logger
from .jobs import (
    run_full_sync, run_park_status_sync, run_wait_time_sync,
    run_attraction_status_sync, run_location_backfill
)

# Generous ceiling so a slow pass never causes the next trigger to be skipped
MAX_CONCURRENT_RUNS = 10

SCHEDULE = (
    ('full_sync', run_full_sync, dict(hour='*/12', minute=0)),
    ('park_status', run_park_status_sync, dict(minute='*/5')),
    ('wait_times', run_wait_time_sync, dict(minute='*/10')),
    ('attraction_status', run_attraction_status_sync, dict(minute='*/5')),
    ('park_locations', run_location_backfill, dict(day_of_week='sun', hour=3, minute=0)),
)


def build_scheduler(initial_sync: bool = True) -> BlockingScheduler:
    """
    Create a scheduler with every sync job registered.

    Args:
        initial_sync: Also queue one full sync to run immediately
    """
    scheduler = BlockingScheduler(timezone='UTC')

    for job_id, func, cron in SCHEDULE:
        scheduler.add_job(
            func,
            CronTrigger(timezone='UTC', **cron),
            id=job_id,
            max_instances=MAX_CONCURRENT_RUNS,
            coalesce=False,
            replace_existing=True,
        )

    if initial_sync:
        # No trigger: runs once as soon as the scheduler starts
        scheduler.add_job(run_full_sync, id='initial_full_sync', replace_existing=True)

    return scheduler


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Run the park sync scheduler'
    )
    parser.add_argument(
        '--no-initial-sync',
        action='store_true',
        help='Do not run a full sync at start-up'
    )
    parser.add_argument(
        '--create-tables',
        action='store_true',
        help='Create missing database tables before starting'
    )
    args = parser.parse_args()

    if args.create_tables:
        create_all()

    scheduler = build_scheduler(initial_sync=not args.no_initial_sync)
    logger.info("Scheduler starting", extra={"jobs": [job.id for job in scheduler.get_jobs()]})

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
        sys.exit(0)


if __name__ == '__main__':
    main()
