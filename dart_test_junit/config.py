"""Configuration for report generation."""

from pathlib import Path

from pydantic import BaseModel, Field


class ReporterConfig(BaseModel):
    """Where suites live and where their reports are written."""

    working_dir: Path = Field(default_factory=Path.cwd)
    test_root: str = "test"
    output_root: str = "coverage"
    # Lenient mode echoes malformed known events instead of aborting the run
    strict: bool = True

    @property
    def test_prefix(self) -> str:
        return f"{self.working_dir}/{self.test_root}/"

    def suite_relative_path(self, suite_path: str) -> str:
        """Suite path with the test root prefix removed."""
        return suite_path.replace(self.test_prefix, "")

    def suite_display_name(self, suite_path: str) -> str:
        """Last segment of the relative suite path (e.g. ``a_test.dart``)."""
        return self.suite_relative_path(suite_path).split("/")[-1]

    def suite_output_dir(self, suite_path: str) -> Path:
        """Output directory for a suite, e.g. ``coverage/widgets_a_test.dart``."""
        sanitized = self.suite_relative_path(suite_path).replace("/", "_")
        return self.working_dir / self.output_root / sanitized
