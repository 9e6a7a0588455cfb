"""
Sync Trigger CLI
================

Runs a single sync trigger once, for cron or manual use.

Usage:
    # Full reconciliation pass
    python -m parkfan.scripts.run_sync full

    # High-frequency passes
    python -m parkfan.scripts.run_sync park-status
    python -m parkfan.scripts.run_sync wait-times
    python -m parkfan.scripts.run_sync attraction-status

    # Weekly geocoding backfill
    python -m parkfan.scripts.run_sync locations

Exit code is always 0 unless the arguments are invalid: failures are logged,
not raised.
"""

import argparse

from ..database.connection import create_all
from .jobs import JOBS


def main(argv=None):
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Run one park sync job'
    )
    parser.add_argument(
        'job',
        choices=sorted(JOBS),
        help='Sync job to run'
    )
    parser.add_argument(
        '--create-tables',
        action='store_true',
        help='Create missing database tables first'
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        create_all()

    JOBS[args.job]()


if __name__ == '__main__':
    main()
