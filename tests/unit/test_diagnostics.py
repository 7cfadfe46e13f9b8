"""Tests for live failure diagnostics."""

import io
from pathlib import Path

from dart_test_junit.diagnostics import DiagnosticsReporter
from dart_test_junit.models.events import TestResult
from dart_test_junit.testing.factories import TestRecordFactory


def reporter(stream: io.StringIO) -> DiagnosticsReporter:
    """Create a reporter rooted at /app."""
    return DiagnosticsReporter(working_dir=Path("/app"), stream=stream)


def test_reports_location_name_details_and_error() -> None:
    """Writes the relative location, name, details and error."""
    stream = io.StringIO()
    test = TestRecordFactory.build(
        name="adds numbers",
        result=TestResult.FAILURE,
        root_url="file:///app/test/math_test.dart",
        root_line=12,
        root_column=5,
        line=3,
        column=1,
        stack_trace="test/math_test.dart 14:7\nmain",
        prints=["computed 0"],
        error="Expected: <1>\n  Actual: <0>",
    )

    reporter(stream).report_failure(test)

    output = stream.getvalue()
    assert "✗ FAIL" in output
    assert "test/math_test.dart:12:5" in output
    assert "adds numbers" in output
    assert "\ttest/math_test.dart 14:7\n\tmain\n\tcomputed 0" in output
    assert "Expected: <1>\n\t  Actual: <0>" in output


def test_falls_back_to_test_location() -> None:
    """Uses line and column when the root location is missing."""
    test = TestRecordFactory.build(
        root_url=None, root_line=None, root_column=None, line=8, column=2
    )

    output = reporter(io.StringIO()).format_failure(test)

    assert ":8:2" in output


def test_defaults_location_to_zero() -> None:
    """Uses 0:0 when no location is known."""
    test = TestRecordFactory.build(
        root_url=None, root_line=None, root_column=None, line=None, column=None
    )

    output = reporter(io.StringIO()).format_failure(test)

    assert ":0:0" in output


def test_flushes_stream() -> None:
    """Flushes after writing so output interleaves with the live stream."""

    class Stream(io.StringIO):
        flushed = 0

        def flush(self) -> None:
            self.flushed += 1
            super().flush()

    stream = Stream()

    reporter(stream).report_failure(TestRecordFactory.build(error="boom"))

    assert stream.flushed == 1
