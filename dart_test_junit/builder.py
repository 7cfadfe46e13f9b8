"""Assembly of per-suite reports once the event stream has ended."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import timedelta

from dart_test_junit.config import ReporterConfig
from dart_test_junit.correlation import CorrelationStore
from dart_test_junit.models.events import TestResult
from dart_test_junit.models.records import TestRecord
from dart_test_junit.models.report import SuiteReport, TestCaseReport

log = logging.getLogger(__name__)


def is_hidden(test: TestRecord) -> bool:
    """Successful loading, setup and teardown tests are left out of reports."""
    return test.result == TestResult.SUCCESS and test.is_lifecycle


@dataclass(frozen=True, kw_only=True)
class ReportBuilder:
    """Partitions correlated tests by suite and computes their timings."""

    config: ReporterConfig

    def build(self, store: CorrelationStore) -> Sequence[SuiteReport]:
        """Build one report per suite, in suite declaration order.

        Pending tests are moved onto their suites, so this drains the store.
        """
        reports: list[SuiteReport] = []
        for suite in store.suites:
            store.take_suite_tests(suite)
            cases = [
                self._build_case(store, test)
                for test in suite.tests
                if not is_hidden(test)
            ]
            reports.append(
                SuiteReport(
                    suite=suite,
                    display_name=self.config.suite_display_name(suite.path),
                    output_dir=self.config.suite_output_dir(suite.path),
                    timestamp=store.run_start,
                    cases=cases,
                )
            )

        if store.pending:
            log.warning(
                "%d test(s) reference undeclared suites and were not reported",
                len(store.pending),
            )
        return reports

    def _build_case(self, store: CorrelationStore, test: TestRecord) -> TestCaseReport:
        started = store.run_start + timedelta(milliseconds=test.start_offset_ms)
        duration: float | None = None
        if test.result is not None and test.end_offset_ms is not None:
            duration = (test.end_offset_ms - test.start_offset_ms) / 1000
        else:
            log.warning("Test %r did not finish", test.name)
        return TestCaseReport(record=test, timestamp=started, duration=duration)
