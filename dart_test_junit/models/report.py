"""Models for the per-suite report produced at the end of a run."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import Field

from dart_test_junit.models.base import Model
from dart_test_junit.models.events import TestResult
from dart_test_junit.models.records import Suite, TestRecord


@dataclass(frozen=True, kw_only=True)
class TestCaseReport:
    """A test case as it appears in the emitted report."""

    __test__ = False

    record: TestRecord
    timestamp: datetime
    duration: float | None

    @property
    def finished(self) -> bool:
        return self.duration is not None


@dataclass(frozen=True, kw_only=True)
class SuiteReport:
    """Result container for a suite's report."""

    suite: Suite
    display_name: str
    output_dir: Path
    timestamp: datetime
    cases: Sequence[TestCaseReport] = field(default_factory=list)

    @property
    def tests(self) -> int:
        return len(self.cases)

    @property
    def failures(self) -> int:
        return sum(
            1
            for case in self.cases
            if case.finished and case.record.result == TestResult.FAILURE
        )

    @property
    def errors(self) -> int:
        return sum(
            1
            for case in self.cases
            if case.finished and case.record.result == TestResult.ERROR
        )

    @property
    def has_errors(self) -> bool:
        """Whether any emitted test finished with ``error``."""
        return any(case.record.result == TestResult.ERROR for case in self.cases)


class TestInfo(Model):
    """Sidecar written next to ``results.xml``."""

    __test__ = False

    test_name: str = Field(..., alias="test-name")
