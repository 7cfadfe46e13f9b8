"""Mutable state accumulated while correlating machine events."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from dart_test_junit.models.events import TestResult

LIFECYCLE_SUFFIXES = ("(setUpAll)", "(setUp)", "(tearDownAll)", "(tearDown)")


@dataclass(kw_only=True, eq=False)
class Suite:
    """A declared suite and, once the stream ends, the tests it owns."""

    id: int
    path: str
    platform: str
    tests: list["TestRecord"] = field(default_factory=list)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Suite):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(kw_only=True)
class TestRecord:
    """Everything known about one test across its start, prints, error and done.

    ``result`` stays ``None`` until the matching ``testDone`` arrives.
    """

    __test__ = False

    id: int
    name: str
    suite_id: int
    group_ids: Sequence[int] = ()
    root_url: str | None = None
    root_line: int | None = None
    root_column: int | None = None
    line: int | None = None
    column: int | None = None
    result: TestResult | None = None
    prints: list[str] = field(default_factory=list)
    error: str | None = None
    stack_trace: str | None = None
    start_offset_ms: int = 0
    end_offset_ms: int | None = None
    arrived_at: datetime | None = None

    @property
    def finished(self) -> bool:
        """Whether a ``testDone`` was seen for this test."""
        return self.result is not None and self.end_offset_ms is not None

    @property
    def failed(self) -> bool:
        return self.result in {TestResult.FAILURE, TestResult.ERROR}

    @property
    def is_lifecycle(self) -> bool:
        """Whether the runner generated this test for loading, setup or teardown."""
        return self.name.startswith("loading /") or self.name.endswith(
            LIFECYCLE_SUFFIXES
        )

    @property
    def location(self) -> tuple[int, int]:
        """Line and column, preferring the root location when known."""
        line = self.root_line if self.root_line is not None else self.line
        column = self.root_column if self.root_column is not None else self.column
        return line or 0, column or 0

    def details(self) -> str:
        """Stack trace followed by every print, each stripped, one per line."""
        parts: list[str] = []
        if self.stack_trace is not None:
            parts.append(self.stack_trace.strip())
        parts.extend(message.strip() for message in self.prints)
        return "\n".join(parts)


@dataclass(frozen=True, kw_only=True)
class Group:
    """A declared group. Kept for completeness, not used in reports."""

    id: int
    suite_id: int
    parent_id: int | None
    name: str
    test_count: int
