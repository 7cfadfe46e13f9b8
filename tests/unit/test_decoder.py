"""Tests for the machine line decoder."""

import json
import logging

import pytest

from dart_test_junit.decoder import EventDecoder, ProtocolError, TextLine
from dart_test_junit.models.events import (
    DoneEvent,
    ErrorEvent,
    PrintEvent,
    StartEvent,
    SuiteEvent,
    TestDoneEvent,
    TestResult,
    TestStartEvent,
)
from dart_test_junit.testing import payloads


@pytest.fixture
def decoder() -> EventDecoder:
    """Create a strict decoder."""
    return EventDecoder()


class TestKnownEvents:
    """Tests for lines carrying known event types."""

    def test_decodes_suite(self, decoder: EventDecoder) -> None:
        """Decodes suite declarations with their nested payload."""
        event = decoder.decode(
            json.dumps(payloads.suite(suite_id=3, path="/app/test/a_test.dart"))
        )

        assert isinstance(event, SuiteEvent)
        assert event.suite.id == 3
        assert event.suite.path == "/app/test/a_test.dart"
        assert event.suite.platform == "vm"

    def test_decodes_test_start_wire_names(self, decoder: EventDecoder) -> None:
        """Maps suiteID, groupIDs and root locations from the wire names."""
        event = decoder.decode(
            json.dumps(
                payloads.test_start(
                    test_id=10,
                    name="adds",
                    suite_id=1,
                    group_ids=[2, 5],
                    root_url="file:///app/test/a_test.dart",
                    root_line=7,
                    root_column=3,
                    time=120,
                )
            )
        )

        assert isinstance(event, TestStartEvent)
        assert event.test.id == 10
        assert event.test.suite_id == 1
        assert list(event.test.group_ids) == [2, 5]
        assert event.test.root_url == "file:///app/test/a_test.dart"
        assert event.test.root_line == 7
        assert event.test.root_column == 3
        assert event.time == 120

    def test_decodes_minimal_test_done(self, decoder: EventDecoder) -> None:
        """Accepts testDone without time, defaulting it to zero."""
        event = decoder.decode('{"type":"testDone","testID":10,"result":"error"}')

        assert isinstance(event, TestDoneEvent)
        assert event.test_id == 10
        assert event.result is TestResult.ERROR
        assert event.time == 0

    def test_decodes_error_without_stack_trace(self, decoder: EventDecoder) -> None:
        """Leaves stack_trace unset when the event has none."""
        event = decoder.decode(
            json.dumps(payloads.error(test_id=4, message="boom", stack_trace=None))
        )

        assert isinstance(event, ErrorEvent)
        assert event.error == "boom"
        assert event.stack_trace is None

    def test_decodes_print(self, decoder: EventDecoder) -> None:
        """Decodes print messages and their message type."""
        event = decoder.decode(json.dumps(payloads.print_message(message="hi")))

        assert isinstance(event, PrintEvent)
        assert event.message == "hi"
        assert event.message_type == "print"

    def test_decodes_lifecycle_events(self, decoder: EventDecoder) -> None:
        """Decodes start and done events."""
        assert isinstance(decoder.decode(json.dumps(payloads.start())), StartEvent)
        assert isinstance(decoder.decode(json.dumps(payloads.done())), DoneEvent)

    def test_ignores_unknown_fields(self, decoder: EventDecoder) -> None:
        """Extra fields added by newer runners are ignored."""
        payload = payloads.done()
        payload["extra"] = {"nested": True}

        assert isinstance(decoder.decode(json.dumps(payload)), DoneEvent)


class TestPassThrough:
    """Tests for lines that are not protocol events."""

    def test_plain_text(self, decoder: EventDecoder) -> None:
        """Returns console noise as a text line."""
        assert decoder.decode("Running tests...\n") == TextLine(
            text="Running tests..."
        )

    def test_unknown_type(self, decoder: EventDecoder) -> None:
        """Returns JSON with an unknown type as a text line."""
        line = '{"type":"debug","message":"x"}'

        assert decoder.decode(line) == TextLine(text=line)

    def test_json_without_type(self, decoder: EventDecoder) -> None:
        """Returns JSON objects without a type as a text line."""
        line = '{"message":"x"}'

        assert decoder.decode(line) == TextLine(text=line)

    def test_non_object_json(self, decoder: EventDecoder) -> None:
        """Returns scalar JSON as a text line."""
        assert decoder.decode("42") == TextLine(text="42")

    def test_blank_line(self, decoder: EventDecoder) -> None:
        """Drops blank lines."""
        assert decoder.decode("   \n") is None

    def test_heartbeat_batch(self, decoder: EventDecoder) -> None:
        """Drops batched event-name arrays."""
        assert decoder.decode('[{"event":"test.startedProcess"}]') is None

    def test_other_arrays(self, decoder: EventDecoder) -> None:
        """Returns arrays that are not heartbeats as text."""
        assert decoder.decode("[1, 2]") == TextLine(text="[1, 2]")


class TestMalformedEvents:
    """Tests for known event types with invalid payloads."""

    def test_strict_raises(self, decoder: EventDecoder) -> None:
        """Raises ProtocolError carrying the offending line."""
        line = '{"type":"testStart","test":{"id":"x"}}'

        with pytest.raises(ProtocolError) as exc_info:
            decoder.decode(line)

        assert exc_info.value.line == line

    def test_strict_rejects_unknown_result(self, decoder: EventDecoder) -> None:
        """Rejects testDone results outside success, failure and error."""
        with pytest.raises(ProtocolError):
            decoder.decode('{"type":"testDone","testID":1,"result":"skipped"}')

    def test_lenient_passes_through(self, caplog: pytest.LogCaptureFixture) -> None:
        """Logs a warning and echoes the line when lenient."""
        line = '{"type":"suite","suite":{}}'

        with caplog.at_level(logging.WARNING):
            decoded = EventDecoder(strict=False).decode(line)

        assert decoded == TextLine(text=line)
        assert "malformed suite event" in caplog.text
