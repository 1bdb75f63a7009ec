"""Feature-scoped extraction of verdicts from a shared batch report."""

import logging
from collections.abc import Sequence

from cucumber_batch.classifier import classify, is_failing
from cucumber_batch.models.report import BatchReport, FileEntry
from cucumber_batch.models.result import FailureMessage, ScenarioVerdict
from cucumber_batch.paths import is_same_file

log = logging.getLogger(__name__)

GENERIC_FAILURE = "Scenario failed"


def find_file_entry(report: BatchReport, file_identity: str) -> FileEntry | None:
    """Return the first report entry describing the given feature file."""
    for entry in report:
        is_match = is_same_file(file_identity, entry.identity)
        log.debug("Comparing %s with %s: %s", file_identity, entry.identity, is_match)
        if is_match:
            return entry
    return None


def extract_for_file(
    report: BatchReport, file_identity: str
) -> Sequence[ScenarioVerdict]:
    """Classify every scenario the report holds for one feature file.

    Background elements are skipped. Only the first matching file entry is
    used, since a feature file is reported once per run.

    Returns:
        Verdicts in report order, empty when the file is not in the report

    """
    entry = find_file_entry(report, file_identity)
    if entry is None:
        _log_unmatched(report, file_identity)
        return []

    verdicts = [
        classify(element) for element in entry.elements if not element.is_background
    ]
    log.debug(
        "Found %d scenario result(s) for %s at line(s) %s",
        len(verdicts),
        file_identity,
        ", ".join(str(v.line) for v in verdicts),
    )
    return verdicts


def has_any_failure(report: BatchReport, file_identity: str) -> bool:
    """Check whether any scenario of a feature file failed.

    Stops at the first failing element. A file absent from the report is
    treated as passed; the mismatch is logged so it can be diagnosed.
    """
    entry = find_file_entry(report, file_identity)
    if entry is None:
        _log_unmatched(report, file_identity)
        return False

    for element in entry.elements:
        if element.is_background:
            continue
        if is_failing(element):
            log.debug(
                "Feature %s has a failure at line %s", file_identity, element.line
            )
            return True

    log.debug("All scenarios passed in %s", file_identity)
    return False


def failure_messages(
    report: BatchReport, file_identity: str
) -> Sequence[FailureMessage]:
    """Build one message per failed scenario of a feature file."""
    return messages_for(extract_for_file(report, file_identity))


def messages_for(verdicts: Sequence[ScenarioVerdict]) -> Sequence[FailureMessage]:
    """Build one message per failed verdict, located where the failure is."""
    messages: list[FailureMessage] = []
    for verdict in verdicts:
        if verdict.passed:
            continue
        header = f"Scenario: {verdict.name} (line {verdict.line})"
        if verdict.failure is None:
            text = f"{header}\n\n{GENERIC_FAILURE}"
            messages.append(FailureMessage(text=text, location_line=verdict.line))
            continue
        failure = verdict.failure
        messages.append(
            FailureMessage(
                text=f"{header}\n\n{failure.label}\n\n{failure.message}",
                location_line=failure.report_line,
            )
        )
    return messages


def _log_unmatched(report: BatchReport, file_identity: str) -> None:
    log.warning(
        "Feature %s not found in report; available features: %s",
        file_identity,
        ", ".join(entry.identity or "unknown" for entry in report) or "none",
    )
