"""Classification of reported scenarios into pass/fail verdicts."""

import logging

from cucumber_batch.models.report import PASSED, SKIPPED, ElementEntry
from cucumber_batch.models.result import FailureDetail, ScenarioVerdict

log = logging.getLogger(__name__)

SETUP_ERROR_MESSAGE = (
    "All steps were skipped. Check for errors in @Before hooks or step definitions."
)
EMPTY_SCENARIO_MESSAGE = "Scenario has no steps"


def classify(element: ElementEntry) -> ScenarioVerdict:
    """Classify a scenario element, locating the first real cause of failure.

    Precedence, first applicable wins: failed Before hook, first failing
    (non-skipped) step, all steps skipped, no steps at all, failed After hook.
    Hook and setup failures are reported at the scenario's own line, step
    failures at the failing step's line.
    """
    line = element.line or 0
    failure = _before_hook_failure(element, line)

    if failure is None and element.steps:
        failure = _step_failure(element, line)
        if failure is None and all(step.status == SKIPPED for step in element.steps):
            failure = FailureDetail(
                kind="setup",
                label="Scenario Setup Error",
                message=SETUP_ERROR_MESSAGE,
                report_line=line,
            )
    elif failure is None:
        failure = FailureDetail(
            kind="empty",
            label="Empty Scenario",
            message=EMPTY_SCENARIO_MESSAGE,
            report_line=line,
        )

    if failure is None:
        failure = _after_hook_failure(element, line)

    verdict = ScenarioVerdict(
        name=element.name or "Unnamed scenario",
        line=line,
        passed=not is_failing(element),
        failure=failure,
    )

    log.debug(
        "Scenario %r at line %d: %s",
        verdict.name,
        verdict.line,
        "PASSED" if verdict.passed else "FAILED",
    )
    if failure is not None:
        log.debug("Failure %r reported at line %d", failure.label, failure.report_line)

    return verdict


def is_failing(element: ElementEntry) -> bool:
    """Check whether an element failed without building failure details.

    Any hook or step that did not pass fails the element, as does an element
    without steps.
    """
    if any(hook.failed for hook in element.before):
        return True
    if not element.steps:
        return True
    if any(step.status != PASSED for step in element.steps):
        return True
    return any(hook.failed for hook in element.after)


def _before_hook_failure(element: ElementEntry, line: int) -> FailureDetail | None:
    for hook in element.before:
        if hook.failed:
            return FailureDetail(
                kind="before_hook",
                label="Before Hook Failed",
                message=hook.failure_message(),
                report_line=line,
            )
    return None


def _step_failure(element: ElementEntry, line: int) -> FailureDetail | None:
    for step in element.steps:
        if step.status in (PASSED, SKIPPED):
            continue
        return FailureDetail(
            kind="step",
            label=f"{step.keyword.strip()} {step.name or 'Unknown step'}".strip(),
            message=step.error_message or f"Step {step.status}",
            report_line=step.line or line,
        )
    return None


def _after_hook_failure(element: ElementEntry, line: int) -> FailureDetail | None:
    for hook in element.after:
        if hook.failed:
            return FailureDetail(
                kind="after_hook",
                label="After Hook Failed",
                message=hook.failure_message(),
                report_line=line,
            )
    return None
