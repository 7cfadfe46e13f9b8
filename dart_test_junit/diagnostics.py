"""Live failure output written to stderr as tests complete."""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from dart_test_junit.models.records import TestRecord


class Ansi:
    RESET = "\033[0m"
    UNDERLINE = "\033[4m"
    RED = "\033[31m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"
    BRIGHT_BLACK = "\033[90m"
    BG_RED = "\033[41m"
    BG_WHITE = "\033[47m"
    BG_RESET = "\033[49m"
    FG_RESET = "\033[39m"


def indent(text: str) -> str:
    return text.strip().replace("\n", "\n\t").strip()


@dataclass(kw_only=True)
class DiagnosticsReporter:
    """Prints a colored block for every failed or errored test."""

    working_dir: Path = field(default_factory=Path.cwd)
    stream: TextIO = field(default_factory=lambda: sys.stderr)

    def source_path(self, test: TestRecord) -> str:
        """Test file path relative to the working directory."""
        url = test.root_url or ""
        return url.replace("file://", "").replace(f"{self.working_dir}/", "")

    def format_failure(self, test: TestRecord) -> str:
        line, column = test.location
        header = (
            f"{Ansi.BG_RED}{Ansi.WHITE} ✗ FAIL {Ansi.FG_RESET}{Ansi.BG_RESET}"
            f"{Ansi.BG_WHITE} {Ansi.BRIGHT_BLACK}{Ansi.UNDERLINE}"
            f"{self.source_path(test)}:{line}:{column}"
            f"{Ansi.RESET}{Ansi.BG_RESET}"
        )
        return (
            f"{header}\n"
            f"{Ansi.BLUE}{test.name}{Ansi.FG_RESET}\n\n"
            f"\t{indent(test.details())}\n\n"
            f"\t{Ansi.RED}{indent(test.error or '')}{Ansi.FG_RESET}\n\n"
        )

    def report_failure(self, test: TestRecord) -> None:
        """Write the failure block for ``test`` and flush immediately."""
        self.stream.write(self.format_failure(test))
        self.stream.flush()
