"""Loading and disposal of Cucumber JSON report files."""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from cucumber_batch.models.report import BatchReport, FileEntry

log = logging.getLogger(__name__)

_REPORT_ADAPTER = TypeAdapter(list[FileEntry])


class ReportError(Exception):
    """Raised when a run did not leave a usable report behind."""


class MissingReportError(ReportError):
    """Raised when the report file was never written."""


class MalformedReportError(ReportError):
    """Raised when the report is not a JSON array of feature entries."""


def load_report(report_path: Path) -> BatchReport:
    """Read and validate a Cucumber JSON report.

    The process that writes the report has terminated by the time this is
    called, so the file is either complete or unusable.

    Raises:
        MissingReportError: If the file does not exist
        MalformedReportError: If the content is not valid JSON, not a
            top-level array, or contains entries of the wrong shape

    """
    if not report_path.exists():
        raise MissingReportError(f"Report file was not created: {report_path}")

    try:
        data = json.loads(report_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedReportError(f"Cannot read report {report_path}: {e}") from e

    if not isinstance(data, list):
        raise MalformedReportError(
            f"Report {report_path} is not a Cucumber JSON array "
            f"(got {type(data).__name__})"
        )

    try:
        report = _REPORT_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise MalformedReportError(f"Report {report_path} has invalid entries") from e

    log.debug("Loaded report %s with %d feature(s)", report_path, len(report))
    return report


def cleanup_report(report_path: Path) -> None:
    """Delete a consumed report file, logging rather than raising on failure."""
    try:
        report_path.unlink(missing_ok=True)
    except OSError as e:
        log.error("Error cleaning up report file %s: %s", report_path, e)
