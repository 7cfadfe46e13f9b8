"""In-memory correlation of machine events by suite, test and group id."""

import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TextIO

from dart_test_junit.models.events import (
    AllSuitesEvent,
    DoneEvent,
    ErrorEvent,
    Event,
    GroupEvent,
    PrintEvent,
    StartEvent,
    SuiteEvent,
    TestDoneEvent,
    TestStartEvent,
)
from dart_test_junit.models.records import Group, Suite, TestRecord

log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(kw_only=True)
class CorrelationStore:
    """Tables of suites, pending tests and groups, mutated one event at a time.

    Tests stay in the pending pool until ``take_suite_tests`` moves them to
    their owning suite at the end of the stream.
    """

    on_failure: Callable[[TestRecord], None] | None = None
    clock: Callable[[], datetime] = utc_now
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    suites: list[Suite] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)
    run_start: datetime = field(default_factory=utc_now)
    _pending: list[TestRecord] = field(default_factory=list)
    _index: dict[int, TestRecord] = field(default_factory=dict)

    @property
    def pending(self) -> Sequence[TestRecord]:
        return self._pending

    def find_test(self, test_id: int) -> TestRecord | None:
        return self._index.get(test_id)

    def apply(self, event: Event) -> None:
        """Apply a decoded event to the tables."""
        if isinstance(event, StartEvent):
            self.run_start = self.clock()
        elif isinstance(event, SuiteEvent):
            self.suites.append(
                Suite(
                    id=event.suite.id,
                    path=event.suite.path,
                    platform=event.suite.platform,
                )
            )
        elif isinstance(event, TestStartEvent):
            self._start_test(event)
        elif isinstance(event, TestDoneEvent):
            self._finish_test(event)
        elif isinstance(event, GroupEvent):
            self.groups.append(
                Group(
                    id=event.group.id,
                    suite_id=event.group.suite_id,
                    parent_id=event.group.parent_id,
                    name=event.group.name,
                    test_count=event.group.test_count,
                )
            )
        elif isinstance(event, PrintEvent):
            if (test := self._lookup(event.test_id, event.type)) is not None:
                test.prints.append(event.message)
        elif isinstance(event, ErrorEvent):
            if (test := self._lookup(event.test_id, event.type)) is not None:
                test.error = event.error
                if test.stack_trace is None and event.stack_trace is not None:
                    test.stack_trace = event.stack_trace
        elif isinstance(event, AllSuitesEvent | DoneEvent):
            self.stdout.flush()

    def take_suite_tests(self, suite: Suite) -> Sequence[TestRecord]:
        """Move every pending test owned by ``suite`` onto it, in arrival order."""
        owned = [test for test in self._pending if test.suite_id == suite.id]
        self._pending = [test for test in self._pending if test.suite_id != suite.id]
        suite.tests.extend(owned)
        return owned

    def _start_test(self, event: TestStartEvent) -> None:
        payload = event.test
        record = TestRecord(
            id=payload.id,
            name=payload.name,
            suite_id=payload.suite_id,
            group_ids=tuple(payload.group_ids),
            root_url=payload.root_url,
            root_line=payload.root_line,
            root_column=payload.root_column,
            line=payload.line,
            column=payload.column,
            start_offset_ms=event.time,
            arrived_at=self.clock(),
        )
        self._pending.append(record)
        # A repeated id keeps resolving to the first record
        self._index.setdefault(record.id, record)

    def _finish_test(self, event: TestDoneEvent) -> None:
        if (test := self._lookup(event.test_id, event.type)) is None:
            return
        already_failed = test.failed
        test.result = event.result
        test.end_offset_ms = event.time
        if test.failed and not already_failed and self.on_failure is not None:
            self.on_failure(test)

    def _lookup(self, test_id: int, event_type: str) -> TestRecord | None:
        test = self._index.get(test_id)
        if test is None:
            log.debug("Dropping %s event for unknown test %d", event_type, test_id)
        return test
