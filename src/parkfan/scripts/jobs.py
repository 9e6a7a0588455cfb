"""
Park Fan Sync - Scheduled job entry points

Every trigger takes no arguments, returns nothing and never raises: any
exception escaping a pass is logged here so the scheduler keeps running.
Overlapping runs are allowed; database unique constraints guard against
double writes.
"""

import time
from typing import Callable, Dict

from ..processor.live_sync import LiveSync
from ..processor.reconciler import Reconciler
from ..utils.logger import logger, log_sync_error


def _run_job(job: str, fn: Callable[[], object]):
    start = time.time()
    logger.info(f"--- Starting {job} job ---", extra={"job": job})
    try:
        fn()
    except Exception as e:
        log_sync_error(e, job)
        return
    logger.info(
        f"--- {job} job completed ---",
        extra={"job": job, "duration_seconds": round(time.time() - start, 2)}
    )


def run_full_sync():
    """Park groups -> parks -> locations -> attractions/shows -> schedules."""
    _run_job("full_sync", lambda: Reconciler().sync_all())


def run_park_status_sync():
    _run_job("park_status", lambda: LiveSync().sync_park_status())


def run_wait_time_sync():
    _run_job("wait_times", lambda: LiveSync().sync_wait_times())


def run_attraction_status_sync():
    _run_job("attraction_status", lambda: LiveSync().sync_attraction_status())


def run_location_backfill():
    _run_job("location_backfill", lambda: Reconciler().update_park_locations())


JOBS: Dict[str, Callable[[], None]] = {
    'full': run_full_sync,
    'park-status': run_park_status_sync,
    'wait-times': run_wait_time_sync,
    'attraction-status': run_attraction_status_sync,
    'locations': run_location_backfill,
}
