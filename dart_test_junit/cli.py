"""CLI entry point converting ``dart test --machine`` output to JUnit XML."""

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import TextIO

from dart_test_junit.builder import ReportBuilder
from dart_test_junit.config import ReporterConfig
from dart_test_junit.correlation import CorrelationStore
from dart_test_junit.decoder import EventDecoder, ProtocolError, TextLine
from dart_test_junit.diagnostics import DiagnosticsReporter
from dart_test_junit.emitter import ReportEmitter, ReportWriteError
from dart_test_junit.golden import GoldenAttachmentResolver
from dart_test_junit.models.report import SuiteReport

USAGE = "flutter test --machine | dart-test-junit"


class InputReadError(Exception):
    """Raised when the machine output cannot be read or decoded as text."""


def read_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield input lines, wrapping read and text decoding failures."""
    iterator = iter(lines)
    while True:
        try:
            line = next(iterator)
        except StopIteration:
            return
        except (OSError, UnicodeDecodeError) as e:
            raise InputReadError(str(e)) from e
        yield line


def log_run_summary(log: logging.Logger, reports: Sequence[SuiteReport]) -> None:
    """Log totals across every suite report."""
    log.info(
        "Reported %d suite(s): %d test(s), %d failure(s), %d error(s)",
        len(reports),
        sum(report.tests for report in reports),
        sum(report.failures for report in reports),
        sum(report.errors for report in reports),
    )


def run(
    lines: Iterable[str],
    config: ReporterConfig,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Consume machine output, write reports and return the exit code."""
    log = logging.getLogger("dart_test_junit")
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    decoder = EventDecoder(strict=config.strict)
    diagnostics = DiagnosticsReporter(working_dir=config.working_dir, stream=stderr)
    store = CorrelationStore(on_failure=diagnostics.report_failure, stdout=stdout)

    try:
        for line in read_lines(lines):
            decoded = decoder.decode(line)
            if decoded is None:
                continue
            if isinstance(decoded, TextLine):
                print(decoded.text, file=stdout)
                continue
            store.apply(decoded)
    except ProtocolError as e:
        log.error("%s", e)
        return 1
    except InputReadError as e:
        log.error("Error reading line: %s", e)
        return 1
    except OSError as e:
        log.error("Error writing output: %s", e)
        return 1

    reports = ReportBuilder(config=config).build(store)
    emitter = ReportEmitter(
        resolver=GoldenAttachmentResolver(working_dir=config.working_dir)
    )
    try:
        for report in reports:
            emitter.emit(report)
    except ReportWriteError as e:
        log.error("%s", e)
        return 1

    log_run_summary(log, reports)

    return 1 if any(report.has_errors for report in reports) else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Converts Dart test output to JUnit XML format",
        usage=USAGE,
    )
    parser.add_argument(
        "--working-dir",
        type=Path,
        default=Path.cwd(),
        help="Project directory holding the test root and report output",
    )
    parser.add_argument(
        "--test-root",
        default="test",
        help="Test directory stripped from suite paths (default: test)",
    )
    parser.add_argument(
        "--output-root",
        default="coverage",
        help="Directory reports are written under (default: coverage)",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Echo malformed events instead of aborting the run",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log progress at INFO level",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    parser = build_parser()

    if sys.stdin.isatty():
        parser.print_help()
        sys.exit(1)

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = ReporterConfig(
        working_dir=args.working_dir.resolve(),
        test_root=args.test_root,
        output_root=args.output_root,
        strict=not args.lenient,
    )
    sys.exit(run(sys.stdin, config))


if __name__ == "__main__":  # pragma: no cover
    main()
