"""
Park Fan Sync - Fan-out Unit Tests

Tests run_isolated() / run_sequential():
- One TaskResult per item
- A failing item never cancels its siblings
- summarize() counts
"""

import threading

from parkfan.utils.fanout import TaskResult, run_isolated, run_sequential, summarize


def _flaky(item):
    if item % 2:
        raise ValueError(f"odd item {item}")
    return item * 10


class TestRunIsolated:

    def test_all_items_settle(self):
        results = run_isolated(range(6), _flaky, max_workers=3)

        assert len(results) == 6
        by_item = {r.item: r for r in results}
        assert by_item[4].success and by_item[4].value == 40
        assert not by_item[3].success
        assert isinstance(by_item[3].error, ValueError)

    def test_empty_items(self):
        assert run_isolated([], _flaky) == []

    def test_runs_concurrently(self):
        """Two tasks waiting on each other only finish if they overlap."""
        barrier = threading.Barrier(2, timeout=5)

        results = run_isolated(["a", "b"], lambda item: barrier.wait() is not None, max_workers=2)

        assert all(r.success for r in results)

    def test_describe_used_for_failures(self, parkfan_caplog):
        run_isolated([1], _flaky, describe=lambda item: f"park #{item}")

        assert any("park #1" in record.getMessage() for record in parkfan_caplog.records)


class TestRunSequential:

    def test_preserves_order_and_isolates_failures(self):
        results = run_sequential([0, 1, 2], _flaky)

        assert [r.item for r in results] == [0, 1, 2]
        assert [r.success for r in results] == [True, False, True]
        assert results[2].value == 20


class TestSummarize:

    def test_counts(self):
        results = [
            TaskResult(item=1, success=True),
            TaskResult(item=2, success=False, error=RuntimeError()),
            TaskResult(item=3, success=True),
        ]
        assert summarize(results) == {'succeeded': 2, 'failed': 1}
