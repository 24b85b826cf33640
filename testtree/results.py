"""Bottom-up folds over test trees: test counts and per-suite result summaries."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from .nodes import Suite, TestCase, TestNode
from .outcomes import OutcomeStatus, SpecOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


def fold_tree(
    node: TestNode,
    test_value: Callable[[TestCase], T],
    empty_suite_value: T,
    visit: Callable[[TestNode, T], None],
    aggregate: Callable[[T, T], T],
) -> T:
    """Fold ``node`` bottom-up and call ``visit`` with each node's folded value."""
    if isinstance(node, TestCase):
        result = test_value(node)
    elif node.children:
        child_results = [fold_tree(child, test_value, empty_suite_value, visit, aggregate) for child in node.children]
        result = child_results[0]
        for child_result in child_results[1:]:
            result = aggregate(result, child_result)
    else:
        result = empty_suite_value

    visit(node, result)
    return result


def _suite_counts(root: TestNode, test_value: Callable[[TestCase], int]) -> dict[str, int]:
    counts: dict[str, int] = {}

    def capture(node: TestNode, count: int) -> None:
        if isinstance(node, Suite):
            counts[node.id] = count

    fold_tree(root, test_value, 0, capture, lambda total, count: total + count)
    return counts


def count_tests(root: TestNode) -> dict[str, int]:
    """Return the number of tests below every suite, keyed by suite id."""
    return _suite_counts(root, lambda _test: 1)


@dataclass(frozen=True)
class SuiteResultSummary:
    suite_id: str
    total: int
    passed: int
    failed: int
    skipped: int
    description: str
    tooltip: str


def describe_counts(total: int, passed: int, failed: int, skipped: int) -> str:
    total_description = "1 test" if total == 1 else f"{total} tests"
    if not total or passed + failed + skipped != total:
        return total_description
    if failed == total:
        return f"{total_description}, all failed"
    if passed == total:
        return f"{total_description}, all passed"
    if skipped == total:
        return f"{total_description}, all skipped"
    parts = [total_description]
    if failed:
        parts.append(f"{failed} failed")
    if passed:
        parts.append(f"{passed} passed")
    if skipped:
        parts.append(f"{skipped} skipped")
    return ", ".join(parts)


def summarize_suite_results(root: Suite, outcomes: Iterable[SpecOutcome]) -> dict[str, SuiteResultSummary]:
    """Summarize outcome statuses for every suite in ``root``.

    Tests are joined to outcomes by id. A suite whose tests were not all
    executed only reports its test count.
    """
    status_by_id = {outcome.id: outcome.status for outcome in outcomes}
    totals = count_tests(root)
    counts_by_status = {
        status: _suite_counts(root, lambda test, status=status: int(status_by_id.get(test.id) is status))
        for status in OutcomeStatus
    }

    summaries: dict[str, SuiteResultSummary] = {}
    suites = [root]
    while suites:
        suite = suites.pop()
        suites.extend(child for child in suite.children if isinstance(child, Suite))
        total = totals.get(suite.id, 0)
        passed = counts_by_status[OutcomeStatus.PASSED].get(suite.id, 0)
        failed = counts_by_status[OutcomeStatus.FAILED].get(suite.id, 0)
        skipped = counts_by_status[OutcomeStatus.SKIPPED].get(suite.id, 0)
        description = f"({describe_counts(total, passed, failed, skipped)})"
        summaries[suite.id] = SuiteResultSummary(
            suite_id=suite.id,
            total=total,
            passed=passed,
            failed=failed,
            skipped=skipped,
            description=description,
            tooltip=f"{suite.tooltip}  {description}",
        )

    logger.info(
        "Processed %d total failed tests, %d total passed tests, %d total skipped tests",
        counts_by_status[OutcomeStatus.FAILED].get(root.id, 0),
        counts_by_status[OutcomeStatus.PASSED].get(root.id, 0),
        counts_by_status[OutcomeStatus.SKIPPED].get(root.id, 0),
    )
    return summaries


__all__ = ["SuiteResultSummary", "count_tests", "describe_counts", "fold_tree", "summarize_suite_results"]
