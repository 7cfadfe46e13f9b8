"""Discovery of golden image comparison artifacts in test output."""

import logging
import re
import shutil
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

# e.g. 'Golden "goldens/home.png": Pixel test failed, see /app/test/failures'
GOLDEN_PATTERN = re.compile(r'Golden "(.+?)"')
FAILURES_DIR_PATTERN = re.compile(r"(\S+)/failures")


def find_failures_dir(message: str) -> Path | None:
    """Return the failures directory named by a golden mismatch message."""
    if GOLDEN_PATTERN.search(message) is None:
        return None
    if (match := FAILURES_DIR_PATTERN.search(message)) is None:
        return None
    return Path(f"{match.group(1)}/failures")


@dataclass(frozen=True, kw_only=True)
class GoldenAttachmentResolver:
    """Copies golden failure artifacts next to a suite's report.

    Relative failures paths are resolved against ``working_dir``.
    """

    working_dir: Path = field(default_factory=Path.cwd)

    def resolve(
        self, prints: Iterable[str], output_dir: Path
    ) -> Sequence[Sequence[str]]:
        """Stage the artifacts referenced by each qualifying print.

        Returns one group of copied file names per print that named an
        existing failures directory.

        Raises:
            OSError: If the output directory or a copy cannot be written

        """
        groups: list[Sequence[str]] = []
        for message in prints:
            failures_dir = find_failures_dir(message)
            if failures_dir is None:
                continue
            failures_dir = self.working_dir / failures_dir
            if not failures_dir.is_dir():
                continue
            groups.append(self._copy_artifacts(failures_dir, output_dir))
        return groups

    def _copy_artifacts(self, failures_dir: Path, output_dir: Path) -> Sequence[str]:
        output_dir.mkdir(parents=True, exist_ok=True)
        copied: list[str] = []
        for entry in sorted(failures_dir.iterdir()):
            if not entry.is_file():
                continue
            shutil.copyfile(entry, output_dir / entry.name)
            copied.append(entry.name)
        log.info(
            "Copied %d golden artifact(s) from %s to %s",
            len(copied),
            failures_dir,
            output_dir,
        )
        return copied
