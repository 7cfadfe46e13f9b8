"""Rendering and writing of JUnit XML reports."""

import logging
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from dart_test_junit.golden import GoldenAttachmentResolver
from dart_test_junit.models.events import TestResult
from dart_test_junit.models.report import SuiteReport, TestCaseReport, TestInfo

log = logging.getLogger(__name__)

XSI_NAMESPACE = "https://www.w3.org/2001/XMLSchema-instance"
JUNIT_SCHEMA_LOCATION = (
    "https://github.com/jenkinsci/xunit-plugin/raw/master/src/main/resources"
    "/org/jenkinsci/plugins/xunit/types/model/xsd/junit-10.xsd"
)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
RESULTS_FILE = "results.xml"
TEST_INFO_FILE = "test-info.json"
NOT_FINISHED_MESSAGE = "Test not finished"


class ReportWriteError(Exception):
    """Raised when a report or one of its attachments cannot be written."""


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def render_test_case(
    case: TestCaseReport, attachments: Sequence[Sequence[str]] = ()
) -> ET.Element:
    """Render a ``testcase`` element with its error and attachments."""
    test = case.record
    element = ET.Element("testcase")
    element.set("name", test.name)
    element.set("timestamp", format_timestamp(case.timestamp))
    element.set("time", str(case.duration if case.duration is not None else 0))

    if not case.finished:
        ET.SubElement(element, "error", message=NOT_FINISHED_MESSAGE)
    elif test.result != TestResult.SUCCESS:
        error = ET.SubElement(element, "error", message=test.details())
        error.text = test.error or ""

    for group in attachments:
        attachments_element = ET.SubElement(element, "attachments")
        for name in group:
            ET.SubElement(attachments_element, "attachment").text = name

    return element


def render_suite(
    report: SuiteReport,
    attachments: Sequence[Sequence[Sequence[str]]] | None = None,
) -> ET.Element:
    """Render the ``testsuite`` root element for a report.

    ``attachments`` holds, per case, the attachment groups staged for it.
    """
    element = ET.Element("testsuite")
    element.set("xmlns:xsi", XSI_NAMESPACE)
    element.set("xsi:noNamespaceSchemaLocation", JUNIT_SCHEMA_LOCATION)
    element.set("file", report.suite.path)
    element.set("name", report.display_name)
    element.set("tests", str(report.tests))
    element.set("errors", str(report.errors))
    element.set("failures", str(report.failures))
    element.set("timestamp", format_timestamp(report.timestamp))

    for index, case in enumerate(report.cases):
        groups = attachments[index] if attachments is not None else ()
        element.append(render_test_case(case, groups))

    return element


@dataclass(frozen=True, kw_only=True)
class ReportEmitter:
    """Writes ``results.xml`` and ``test-info.json`` for each suite."""

    resolver: GoldenAttachmentResolver = field(
        default_factory=GoldenAttachmentResolver
    )

    def emit(self, report: SuiteReport) -> Path:
        """Stage attachments and write both report files for a suite.

        Returns:
            Path of the written XML report

        Raises:
            ReportWriteError: If the output directory, a report file or an
                attachment cannot be written

        """
        output_dir = report.output_dir
        try:
            attachments = [
                self.resolver.resolve(case.record.prints, output_dir)
                for case in report.cases
            ]
            output_dir.mkdir(parents=True, exist_ok=True)

            results_path = output_dir / RESULTS_FILE
            tree = ET.ElementTree(render_suite(report, attachments))
            tree.write(results_path, encoding="utf-8", xml_declaration=True)

            test_info = TestInfo(test_name=report.display_name)
            (output_dir / TEST_INFO_FILE).write_text(
                test_info.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
            )
        except OSError as e:
            raise ReportWriteError(
                f"Failed to write report for {report.suite.path} to {output_dir}: {e}"
            ) from e

        log.info(
            "Wrote %s (tests=%d, failures=%d, errors=%d)",
            results_path,
            report.tests,
            report.failures,
            report.errors,
        )
        return results_path
