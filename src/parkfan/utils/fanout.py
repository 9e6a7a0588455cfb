"""
Isolated fan-out for reconciliation passes.

Runs one callable per item on a thread pool, waits for every task to settle
and reports a TaskResult per item. A failing task never cancels its siblings.

Usage:
    ```python
    results = run_isolated(parks, sync_one_park, max_workers=10)
    failed = [r for r in results if not r.success]
    ```
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, TypeVar

from .logger import logger

T = TypeVar('T')


@dataclass
class TaskResult:
    """Outcome of a single fan-out branch."""
    item: Any
    success: bool
    value: Any = None
    error: Optional[BaseException] = None


def run_isolated(
    items: Iterable[T],
    fn: Callable[[T], Any],
    max_workers: int = 10,
    describe: Optional[Callable[[T], str]] = None
) -> List[TaskResult]:
    """
    Run fn(item) for every item concurrently and collect all outcomes.

    Args:
        items: Work items
        fn: Callable invoked once per item
        max_workers: Thread pool size
        describe: Optional label function used in failure logs

    Returns:
        List of TaskResult, one per item, in completion order
    """
    items = list(items)
    if not items:
        return []

    results: List[TaskResult] = []

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(items)))) as executor:
        future_to_item = {executor.submit(fn, item): item for item in items}

        for future in as_completed(future_to_item):
            item = future_to_item[future]
            try:
                results.append(TaskResult(item=item, success=True, value=future.result()))
            except Exception as e:
                label = describe(item) if describe else repr(item)
                logger.warning(
                    f"Task failed for {label}: {e}",
                    extra={'item': label, 'error_type': type(e).__name__}
                )
                results.append(TaskResult(item=item, success=False, error=e))

    return results


def run_sequential(
    items: Iterable[T],
    fn: Callable[[T], Any],
    describe: Optional[Callable[[T], str]] = None
) -> List[TaskResult]:
    """
    Run fn(item) for every item in order, isolating failures like run_isolated.

    Used where writes must not interleave (schedule days of one park).
    """
    results: List[TaskResult] = []
    for item in items:
        try:
            results.append(TaskResult(item=item, success=True, value=fn(item)))
        except Exception as e:
            label = describe(item) if describe else repr(item)
            logger.warning(
                f"Task failed for {label}: {e}",
                extra={'item': label, 'error_type': type(e).__name__}
            )
            results.append(TaskResult(item=item, success=False, error=e))
    return results


def summarize(results: List[TaskResult]) -> dict:
    """Count successes and failures for completion logs."""
    succeeded = sum(1 for r in results if r.success)
    return {'succeeded': succeeded, 'failed': len(results) - succeeded}
