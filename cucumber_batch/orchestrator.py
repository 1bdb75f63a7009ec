"""Batch orchestrator running many targets in one Cucumber invocation."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from cucumber_batch.config import BatchSettings
from cucumber_batch.correlator import apply_verdicts
from cucumber_batch.extractor import (
    extract_for_file,
    failure_messages,
    find_file_entry,
    has_any_failure,
    messages_for,
)
from cucumber_batch.invocation import Invocation, build_invocation
from cucumber_batch.launchers.base import (
    Cancelled,
    Completed,
    ProcessLauncher,
    RunOutcome,
    TimedOut,
)
from cucumber_batch.models.report import BatchReport
from cucumber_batch.models.result import (
    FailureMessage,
    ScenarioVerdict,
    TargetVerdict,
)
from cucumber_batch.models.target import RequestedTarget
from cucumber_batch.report_loader import ReportError, load_report
from cucumber_batch.tree import NodeMessage, TestNode, TestTree

log = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Run cancelled"
UNMATCHED_MESSAGE = "Feature file not found in test report"


class NoTargetsError(ValueError):
    """Raised when a batch is requested without any target."""


@dataclass(frozen=True, kw_only=True)
class BatchResult:
    """Verdicts of one batch, one per requested target, in request order."""

    verdicts: Sequence[TargetVerdict]
    report_available: bool
    outcome: RunOutcome | None = None
    report_path: Path | None = None

    @property
    def passed(self) -> bool:
        """Whether every target passed."""
        return all(verdict.passed for verdict in self.verdicts)


@dataclass(frozen=True, kw_only=True)
class BatchOrchestrator[T]:
    """Runs a batch of targets through one launcher invocation."""

    launcher: ProcessLauncher[T]
    settings: BatchSettings = field(default_factory=BatchSettings)

    async def run_batch(
        self,
        targets: Sequence[RequestedTarget],
        tree: TestTree | None = None,
        cancellation: asyncio.Event | None = None,
    ) -> BatchResult:
        """Run all targets in a single invocation and correlate the report.

        Args:
            targets: Targets to run, in the order verdicts are returned
            tree: Optional tree whose nodes receive the verdicts
            cancellation: Event set by the caller to stop the batch

        Returns:
            One verdict per target

        Raises:
            NoTargetsError: If no target was given

        """
        if not targets:
            raise NoTargetsError("At least one target is required")

        invocation = build_invocation(targets, self.settings)
        nodes = resolve_nodes(targets, tree)
        if tree is not None:
            for node in nodes:
                if node is not None:
                    tree.mark_started(node.node_id)

        log.info(
            "Running %d target(s) as %r: %s",
            len(targets),
            invocation.run_name,
            " ".join(invocation.feature_paths),
        )

        try:
            outcome = await self._execute(invocation, cancellation)
        except Exception as e:
            log.error("Cucumber run failed to execute: %s", e, exc_info=e)
            return _fail_all(targets, nodes, tree, invocation, str(e))

        match outcome:
            case Completed(report_path=report_path):
                try:
                    report = load_report(report_path)
                except ReportError as e:
                    log.error("No usable report: %s", e)
                    return _fail_all(
                        targets, nodes, tree, invocation, str(e), outcome=outcome
                    )
            case TimedOut(timeout=timeout):
                reason = f"Test execution timed out after {timeout:g} seconds"
                return _fail_all(
                    targets, nodes, tree, invocation, reason, outcome=outcome
                )
            case Cancelled():
                return _fail_all(
                    targets, nodes, tree, invocation, CANCELLED_MESSAGE, outcome=outcome
                )

        verdicts = correlate_report(
            report,
            targets,
            nodes,
            tree=tree,
            unmatched_file_policy=self.settings.unmatched_file_policy,
            cancellation=cancellation,
        )
        return BatchResult(
            verdicts=verdicts,
            report_available=True,
            outcome=outcome,
            report_path=invocation.report_path,
        )

    async def _execute(
        self, invocation: Invocation, cancellation: asyncio.Event | None
    ) -> RunOutcome:
        state = await self.launcher.launch(invocation)
        log.info("%s launched, waiting for completion...", invocation.run_name)
        return await self.launcher.wait_for_termination(
            state,
            invocation,
            timeout=self.settings.timeout,
            cancellation=cancellation,
        )


def resolve_nodes(
    targets: Sequence[RequestedTarget], tree: TestTree | None
) -> Sequence[TestNode | None]:
    """Find the tree node of each target, None where the tree has none."""
    if tree is None:
        return [None] * len(targets)

    nodes: list[TestNode | None] = []
    for target in targets:
        node = tree.find(target.file, target.line)
        if node is None:
            log.warning("No tree node for %s at line %s", target.file, target.line)
        nodes.append(node)
    return nodes


def correlate_report(
    report: BatchReport,
    targets: Sequence[RequestedTarget],
    nodes: Sequence[TestNode | None] | None = None,
    *,
    tree: TestTree | None = None,
    unmatched_file_policy: Literal["pass", "fail"] = "pass",
    cancellation: asyncio.Event | None = None,
) -> Sequence[TargetVerdict]:
    """Compute target verdicts from a shared report and record them on the tree.

    Targets whose node has children also get their descendants painted. The
    cancellation event is checked before each target; once set, remaining
    targets are failed without reading the report.
    """
    if nodes is None:
        nodes = resolve_nodes(targets, tree)

    verdicts: list[TargetVerdict] = []
    for target, node in zip(targets, nodes, strict=True):
        if cancellation is not None and cancellation.is_set():
            log.warning("Batch cancelled, %s not correlated", target.file)
            verdicts.append(_failed_verdict(target, CANCELLED_MESSAGE, node, tree))
            continue

        verdict = target_verdict(
            report, target, unmatched_file_policy, node=node, tree=tree
        )
        verdicts.append(verdict)

        if tree is None or node is None:
            continue
        if not node.is_leaf:
            scenario_verdicts = extract_for_file(report, target.file)
            applied = apply_verdicts(tree, node.node_id, scenario_verdicts)
            log.debug("Recorded %d verdict(s) under node %d", applied, node.node_id)
        _record_target(tree, node, verdict)

    return verdicts


def target_verdict(
    report: BatchReport,
    target: RequestedTarget,
    unmatched_file_policy: Literal["pass", "fail"] = "pass",
    *,
    node: TestNode | None = None,
    tree: TestTree | None = None,
) -> TargetVerdict:
    """Decide whether one target passed, with its failure messages.

    Whole-file targets use the short-circuiting feature aggregation. Scenario
    and example targets only consider their own results, since other targets
    of the batch may select other scenarios of the same file.
    """
    if find_file_entry(report, target.file) is None:
        log.warning(
            "No results for %s in report; marking it %s per unmatched file policy",
            target.file,
            unmatched_file_policy,
        )
        if unmatched_file_policy == "fail":
            return TargetVerdict(
                target=target,
                status="failed",
                failure_messages=[FailureMessage(text=UNMATCHED_MESSAGE)],
                matched_in_report=False,
            )
        return TargetVerdict(target=target, status="passed", matched_in_report=False)

    if target.line is None:
        if not has_any_failure(report, target.file):
            return TargetVerdict(target=target, status="passed")
        return TargetVerdict(
            target=target,
            status="failed",
            failure_messages=failure_messages(report, target.file),
        )

    scoped = _scope_to_target(extract_for_file(report, target.file), target, node, tree)
    if all(verdict.passed for verdict in scoped):
        return TargetVerdict(target=target, status="passed")
    return TargetVerdict(
        target=target, status="failed", failure_messages=messages_for(scoped)
    )


def _scope_to_target(
    verdicts: Sequence[ScenarioVerdict],
    target: RequestedTarget,
    node: TestNode | None,
    tree: TestTree | None,
) -> Sequence[ScenarioVerdict]:
    """Keep the verdicts belonging to a scenario or example target.

    Outline rows are reported at their example lines, so the lines of the
    target node's descendants are accepted too. Without any match the whole
    file is used.
    """
    lines = {target.line}
    if tree is not None and node is not None:
        lines.update(child.line for child in tree.descendants(node.node_id))

    scoped = [verdict for verdict in verdicts if verdict.line in lines]
    if not scoped:
        log.debug(
            "No result at line(s) %s of %s, using the whole file",
            sorted(line for line in lines if line is not None),
            target.file,
        )
        return verdicts
    return scoped


def _fail_all(
    targets: Sequence[RequestedTarget],
    nodes: Sequence[TestNode | None],
    tree: TestTree | None,
    invocation: Invocation,
    reason: str,
    outcome: RunOutcome | None = None,
) -> BatchResult:
    message = (
        f"{reason}\n\nCheck the console output for details: "
        f"{invocation.console_log_path}"
    )
    verdicts = [
        _failed_verdict(target, message, node, tree)
        for target, node in zip(targets, nodes, strict=True)
    ]
    return BatchResult(
        verdicts=verdicts,
        report_available=False,
        outcome=outcome,
        report_path=invocation.report_path,
    )


def _failed_verdict(
    target: RequestedTarget,
    text: str,
    node: TestNode | None,
    tree: TestTree | None,
) -> TargetVerdict:
    verdict = TargetVerdict(
        target=target,
        status="failed",
        failure_messages=[FailureMessage(text=text)],
    )
    if tree is not None and node is not None:
        _record_target(tree, node, verdict)
    return verdict


def _record_target(tree: TestTree, node: TestNode, verdict: TargetVerdict) -> None:
    if verdict.passed:
        tree.mark_passed(node.node_id)
        return
    tree.mark_failed(
        node.node_id,
        [
            NodeMessage(text=m.text, file=node.file, line=m.location_line)
            for m in verdict.failure_messages
        ],
    )
