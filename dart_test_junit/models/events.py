"""Models for the events emitted by ``dart test --machine``.

Each line of the machine reporter is a JSON object tagged by its ``type``
field. Field names mirror the reporter's protocol exactly, so the wire names
are kept through aliases.
"""

from collections.abc import Sequence
from enum import StrEnum
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from dart_test_junit.models.base import Model


class TestResult(StrEnum):
    """Outcome reported by a ``testDone`` event."""

    __test__ = False

    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class SuitePayload(Model):
    """A test file loaded by the runner."""

    id: int
    path: str
    platform: str


class TestPayload(Model):
    """A single test as announced by ``testStart``."""

    __test__ = False

    id: int
    name: str
    suite_id: int = Field(..., alias="suiteID")
    group_ids: Sequence[int] = Field(default_factory=list, alias="groupIDs")
    line: int | None = None
    column: int | None = None
    url: str | None = None
    root_url: str | None = None
    root_line: int | None = None
    root_column: int | None = None


class GroupPayload(Model):
    """A ``group`` block, possibly nested under a parent group."""

    id: int
    suite_id: int = Field(..., alias="suiteID")
    parent_id: int | None = Field(default=None, alias="parentID")
    name: str
    test_count: int = Field(..., alias="testCount")
    url: str | None = None


class StartEvent(Model):
    """First event of a run."""

    type: Literal["start"]
    protocol_version: str | None = Field(default=None, alias="protocolVersion")
    runner_version: str | None = Field(default=None, alias="runnerVersion")
    pid: int | None = None
    time: int = 0


class SuiteEvent(Model):
    """A suite was declared."""

    type: Literal["suite"]
    suite: SuitePayload
    time: int = 0


class TestStartEvent(Model):
    """A test started running."""

    __test__ = False

    type: Literal["testStart"]
    test: TestPayload
    time: int = 0


class TestDoneEvent(Model):
    """A test finished running."""

    __test__ = False

    type: Literal["testDone"]
    test_id: int = Field(..., alias="testID")
    result: TestResult
    hidden: bool = False
    skipped: bool = False
    time: int = 0


class GroupEvent(Model):
    """A group was declared."""

    type: Literal["group"]
    group: GroupPayload
    time: int = 0


class PrintEvent(Model):
    """A test printed a message."""

    type: Literal["print"]
    test_id: int = Field(..., alias="testID")
    message_type: str = Field(default="print", alias="messageType")
    message: str
    time: int = 0


class ErrorEvent(Model):
    """A test raised an error or failed an expectation."""

    type: Literal["error"]
    test_id: int = Field(..., alias="testID")
    error: str
    stack_trace: str | None = Field(default=None, alias="stackTrace")
    is_failure: bool | None = Field(default=None, alias="isFailure")
    time: int = 0


class AllSuitesEvent(Model):
    """All suites have been declared."""

    type: Literal["allSuites"]
    count: int | None = None
    time: int = 0


class DoneEvent(Model):
    """Last event of a run."""

    type: Literal["done"]
    success: bool | None = None
    time: int = 0


Event = Annotated[
    StartEvent
    | SuiteEvent
    | TestStartEvent
    | TestDoneEvent
    | GroupEvent
    | PrintEvent
    | ErrorEvent
    | AllSuitesEvent
    | DoneEvent,
    Field(discriminator="type"),
]

EVENT_TYPES = frozenset(
    {
        "start",
        "suite",
        "testStart",
        "testDone",
        "group",
        "print",
        "error",
        "allSuites",
        "done",
    }
)

event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


class Envelope(Model):
    """Minimal shape used to route a line before full decoding."""

    type: str


class HeartbeatEntry(Model):
    """One entry of a batched ``[{"event": ...}]`` heartbeat line."""

    event: str


heartbeat_adapter: TypeAdapter[list[HeartbeatEntry]] = TypeAdapter(
    list[HeartbeatEntry]
)
