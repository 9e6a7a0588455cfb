"""
Park Fan Sync - Job Trigger Unit Tests

Tests the scheduled entry points and their drivers:
- Triggers never raise, failures are logged
- Scheduler registers every job on its cron schedule
- CLI dispatches to the selected trigger
"""

from unittest.mock import patch

import pytest
from apscheduler.triggers.cron import CronTrigger
from parkfan.scripts import jobs, run_sync
from parkfan.scripts.run_scheduler import build_scheduler, MAX_CONCURRENT_RUNS


class TestTriggers:

    @pytest.mark.parametrize("trigger,target", [
        (jobs.run_full_sync, 'parkfan.scripts.jobs.Reconciler'),
        (jobs.run_location_backfill, 'parkfan.scripts.jobs.Reconciler'),
        (jobs.run_park_status_sync, 'parkfan.scripts.jobs.LiveSync'),
        (jobs.run_wait_time_sync, 'parkfan.scripts.jobs.LiveSync'),
        (jobs.run_attraction_status_sync, 'parkfan.scripts.jobs.LiveSync'),
    ])
    def test_exceptions_are_swallowed(self, trigger, target, parkfan_caplog):
        with patch(target, side_effect=RuntimeError("upstream exploded")):
            assert trigger() is None

        errors = [r for r in parkfan_caplog.records if r.levelname == "ERROR"]
        assert errors
        assert errors[-1].error_message == "upstream exploded"

    def test_full_sync_runs_reconciler(self):
        with patch('parkfan.scripts.jobs.Reconciler') as mock_reconciler:
            jobs.run_full_sync()

        mock_reconciler.return_value.sync_all.assert_called_once()

    def test_location_backfill(self):
        with patch('parkfan.scripts.jobs.Reconciler') as mock_reconciler:
            jobs.run_location_backfill()

        mock_reconciler.return_value.update_park_locations.assert_called_once()

    def test_live_triggers(self):
        with patch('parkfan.scripts.jobs.LiveSync') as mock_live:
            jobs.run_park_status_sync()
            jobs.run_wait_time_sync()
            jobs.run_attraction_status_sync()

        mock_live.return_value.sync_park_status.assert_called_once()
        mock_live.return_value.sync_wait_times.assert_called_once()
        mock_live.return_value.sync_attraction_status.assert_called_once()

    def test_job_names(self):
        assert set(jobs.JOBS) == {'full', 'park-status', 'wait-times', 'attraction-status', 'locations'}


class TestScheduler:

    def test_registers_all_jobs(self):
        scheduler = build_scheduler()

        job_ids = {job.id for job in scheduler.get_jobs()}
        assert job_ids == {
            'full_sync', 'park_status', 'wait_times', 'attraction_status', 'park_locations',
            'initial_full_sync'
        }

    def test_without_initial_sync(self):
        scheduler = build_scheduler(initial_sync=False)

        assert 'initial_full_sync' not in {job.id for job in scheduler.get_jobs()}

    def test_overlapping_runs_allowed(self):
        scheduler = build_scheduler(initial_sync=False)

        for job in scheduler.get_jobs():
            assert isinstance(job.trigger, CronTrigger)
            assert job.max_instances == MAX_CONCURRENT_RUNS > 1

    def test_cron_fields(self):
        scheduler = build_scheduler(initial_sync=False)
        jobs_by_id = {job.id: job for job in scheduler.get_jobs()}

        def field(job_id, name):
            trigger = jobs_by_id[job_id].trigger
            return str(next(f for f in trigger.fields if f.name == name))

        assert field('full_sync', 'hour') == '*/12'
        assert field('park_status', 'minute') == '*/5'
        assert field('wait_times', 'minute') == '*/10'
        assert field('park_locations', 'day_of_week') == 'sun'


class TestRunSyncCli:

    def test_dispatches_job(self):
        calls = []
        with patch.dict(jobs.JOBS, {'wait-times': lambda: calls.append('wait-times')}):
            run_sync.main(['wait-times'])

        assert calls == ['wait-times']

    def test_create_tables_flag(self):
        with patch('parkfan.scripts.run_sync.create_all') as mock_create, \
                patch.dict(jobs.JOBS, {'full': lambda: None}):
            run_sync.main(['full', '--create-tables'])

        mock_create.assert_called_once()

    def test_rejects_unknown_job(self):
        with pytest.raises(SystemExit):
            run_sync.main(['everything'])
