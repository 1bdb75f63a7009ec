"""Tests for batch orchestrator."""

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from cucumber_batch.config import BatchSettings
from cucumber_batch.invocation import Invocation
from cucumber_batch.launchers.base import (
    Cancelled,
    Completed,
    ProcessLauncher,
    RunOutcome,
    TimedOut,
)
from cucumber_batch.models.report import FileEntry
from cucumber_batch.models.target import RequestedTarget
from cucumber_batch.orchestrator import (
    CANCELLED_MESSAGE,
    UNMATCHED_MESSAGE,
    BatchOrchestrator,
    NoTargetsError,
    correlate_report,
)
from cucumber_batch.testing.payloads import (
    element,
    failing_scenario,
    feature,
    passing_scenario,
    step,
)
from cucumber_batch.tree import TestTree

FEATURES = "src/test/resources/features"

type WaitFn = Callable[..., Awaitable[RunOutcome]]


@pytest.fixture
def launcher_mock() -> Mock:
    """Create mock launcher."""
    return Mock(spec=ProcessLauncher)


@pytest.fixture
def settings(tmp_path: Path) -> BatchSettings:
    """Create settings rooted in tmp_path."""
    return BatchSettings(project_root=tmp_path, timeout=5)


@pytest.fixture
def orchestrator(
    launcher_mock: Mock, settings: BatchSettings
) -> BatchOrchestrator[Any]:
    """Create orchestrator with mock launcher."""
    return BatchOrchestrator(launcher=launcher_mock, settings=settings)


@pytest.fixture
def login(tmp_path: Path) -> str:
    """Absolute path of the login feature."""
    return str(tmp_path / FEATURES / "login.feature")


@pytest.fixture
def checkout(tmp_path: Path) -> str:
    """Absolute path of the checkout feature."""
    return str(tmp_path / FEATURES / "checkout.feature")


def _report() -> list[dict[str, Any]]:
    return [
        feature(
            elements=[
                element(element_type="background", line=3, steps=[step(line=4)]),
                passing_scenario(line=6),
                failing_scenario(line=10),
            ]
        ),
        feature(
            uri=f"file:{FEATURES}/checkout.feature",
            name="Checkout",
            elements=[passing_scenario(line=4)],
        ),
    ]


def _completes_with(content: str | None) -> WaitFn:
    async def _wait(
        state: object,
        invocation: Invocation,
        *,
        timeout: float,
        cancellation: asyncio.Event | None,
    ) -> RunOutcome:
        if content is not None:
            invocation.report_path.parent.mkdir(parents=True, exist_ok=True)
            invocation.report_path.write_text(content)
        return Completed(report_path=invocation.report_path, exit_code=1)

    return _wait


def _ends_with(outcome: RunOutcome) -> WaitFn:
    async def _wait(*args: object, **kwargs: object) -> RunOutcome:
        return outcome

    return _wait


async def test_raises_without_targets(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock
) -> None:
    """Raises NoTargetsError and launches nothing for an empty batch."""
    with pytest.raises(NoTargetsError):
        await orchestrator.run_batch([])

    launcher_mock.launch.assert_not_called()


async def test_runs_all_targets_in_one_invocation(
    orchestrator: BatchOrchestrator[Any],
    launcher_mock: Mock,
    login: str,
    checkout: str,
) -> None:
    """Launches once with every selector and returns verdicts in request order."""
    launcher_mock.launch.return_value = "process"
    launcher_mock.wait_for_termination.side_effect = _completes_with(
        json.dumps(_report())
    )
    targets = [RequestedTarget(file=checkout), RequestedTarget(file=login)]

    result = await orchestrator.run_batch(targets)

    launcher_mock.launch.assert_called_once()
    invocation = launcher_mock.launch.call_args.args[0]
    assert invocation.feature_paths == [
        f"{FEATURES}/checkout.feature",
        f"{FEATURES}/login.feature",
    ]
    assert launcher_mock.wait_for_termination.call_args.kwargs["timeout"] == 5

    assert result.report_available
    assert result.report_path == invocation.report_path
    assert [v.target for v in result.verdicts] == targets
    assert [v.status for v in result.verdicts] == ["passed", "failed"]
    assert not result.passed
    failure = result.verdicts[1].failure_messages[0]
    assert failure.location_line == 12
    assert "Scenario: Failed login (line 10)" in failure.text


async def test_line_targets_only_see_their_own_scenario(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Does not fail a passing scenario because another one in its file failed."""
    launcher_mock.wait_for_termination.side_effect = _completes_with(
        json.dumps(_report())
    )
    targets = [
        RequestedTarget(file=login, scenario_line=6),
        RequestedTarget(file=login, scenario_line=10),
    ]

    result = await orchestrator.run_batch(targets)

    assert [v.status for v in result.verdicts] == ["passed", "failed"]
    assert len(result.verdicts[1].failure_messages) == 1


async def test_fails_all_when_report_missing(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str, checkout: str
) -> None:
    """Fails every target and points at the console log without a report."""
    launcher_mock.wait_for_termination.side_effect = _completes_with(None)

    result = await orchestrator.run_batch(
        [RequestedTarget(file=login), RequestedTarget(file=checkout)]
    )

    assert not result.report_available
    assert [v.status for v in result.verdicts] == ["failed", "failed"]
    text = result.verdicts[0].failure_messages[0].text
    assert "Report file was not created" in text
    assert "Check the console output for details:" in text
    assert text.endswith(".log")


async def test_fails_all_when_report_malformed(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Fails every target when the report is not a JSON array."""
    launcher_mock.wait_for_termination.side_effect = _completes_with('{"oops": 1}')

    result = await orchestrator.run_batch([RequestedTarget(file=login)])

    assert not result.report_available
    assert not result.verdicts[0].passed
    assert "not a Cucumber JSON array" in result.verdicts[0].failure_messages[0].text


async def test_fails_all_on_timeout(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Fails every target with the timeout."""
    launcher_mock.wait_for_termination.side_effect = _ends_with(TimedOut(timeout=5))

    result = await orchestrator.run_batch([RequestedTarget(file=login)])

    assert result.outcome == TimedOut(timeout=5)
    assert result.verdicts[0].failure_messages[0].text.startswith(
        "Test execution timed out after 5 seconds"
    )


async def test_fails_all_on_cancel(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Fails every target when the run is cancelled."""
    launcher_mock.wait_for_termination.side_effect = _ends_with(Cancelled())
    cancellation = asyncio.Event()

    result = await orchestrator.run_batch(
        [RequestedTarget(file=login)], cancellation=cancellation
    )

    assert result.outcome == Cancelled()
    assert result.verdicts[0].failure_messages[0].text.startswith(CANCELLED_MESSAGE)
    assert launcher_mock.wait_for_termination.call_args.kwargs["cancellation"] is (
        cancellation
    )


async def test_fails_all_when_launch_raises(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Converts launch errors into failed verdicts."""
    launcher_mock.launch.side_effect = FileNotFoundError("java not found")

    result = await orchestrator.run_batch([RequestedTarget(file=login)])

    assert result.outcome is None
    assert not result.report_available
    assert "java not found" in result.verdicts[0].failure_messages[0].text
    launcher_mock.wait_for_termination.assert_not_called()


@pytest.mark.parametrize(
    ("policy", "status"),
    [("pass", "passed"), ("fail", "failed")],
)
async def test_unmatched_file_follows_policy(
    launcher_mock: Mock, tmp_path: Path, policy: str, status: str
) -> None:
    """Uses the unmatched file policy for files absent from the report."""
    orchestrator = BatchOrchestrator(
        launcher=launcher_mock,
        settings=BatchSettings(project_root=tmp_path, unmatched_file_policy=policy),
    )
    launcher_mock.wait_for_termination.side_effect = _completes_with(
        json.dumps(_report())
    )

    result = await orchestrator.run_batch(
        [RequestedTarget(file=str(tmp_path / "features/missing.feature"))]
    )

    verdict = result.verdicts[0]
    assert verdict.status == status
    assert not verdict.matched_in_report
    if status == "failed":
        assert verdict.failure_messages[0].text == UNMATCHED_MESSAGE


async def test_records_verdicts_on_tree(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Marks nodes started, then paints the file node and its scenarios."""
    tree = TestTree()
    root = tree.add_node(kind="feature", file=login, line=1)
    passing = tree.add_node(kind="scenario", file=login, line=6, parent_id=root)
    failing = tree.add_node(kind="scenario", file=login, line=10, parent_id=root)
    started: list[str] = []

    async def _launch(invocation: Invocation) -> str:
        started.append(tree.outcome(root).state)
        return "process"

    launcher_mock.launch.side_effect = _launch
    launcher_mock.wait_for_termination.side_effect = _completes_with(
        json.dumps(_report())
    )

    await orchestrator.run_batch([RequestedTarget(file=login)], tree)

    assert started == ["started"]
    assert tree.outcome(root).state == "failed"
    assert tree.outcome(passing).state == "passed"
    assert tree.outcome(failing).state == "failed"
    assert tree.outcome(failing).messages[0].line == 12


async def test_outline_target_uses_example_rows(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Scopes an outline target to the example rows below it."""
    tree = TestTree()
    root = tree.add_node(kind="feature", file=login, line=1)
    outline = tree.add_node(kind="outline", file=login, line=8, parent_id=root)
    first = tree.add_node(kind="example", file=login, line=14, parent_id=outline)
    second = tree.add_node(kind="example", file=login, line=15, parent_id=outline)
    report = [
        feature(
            elements=[
                passing_scenario(line=4),
                passing_scenario(line=14, name="Outline row 1"),
                failing_scenario(line=15, name="Outline row 2"),
            ]
        )
    ]
    launcher_mock.wait_for_termination.side_effect = _completes_with(
        json.dumps(report)
    )

    result = await orchestrator.run_batch(
        [RequestedTarget(file=login, scenario_line=8)], tree
    )

    assert result.verdicts[0].status == "failed"
    assert len(result.verdicts[0].failure_messages) == 1
    assert tree.outcome(outline).state == "failed"
    assert tree.outcome(first).state == "passed"
    assert tree.outcome(second).state == "failed"


async def test_failed_run_leaves_no_node_started(
    orchestrator: BatchOrchestrator[Any], launcher_mock: Mock, login: str
) -> None:
    """Marks target nodes failed when the run produces no report."""
    tree = TestTree()
    node = tree.add_node(kind="scenario", file=login, line=6)
    launcher_mock.wait_for_termination.side_effect = _ends_with(TimedOut(timeout=5))

    await orchestrator.run_batch([RequestedTarget(file=login, scenario_line=6)], tree)

    assert tree.outcome(node).state == "failed"


def test_correlate_report_stops_when_cancelled(login: str, checkout: str) -> None:
    """Fails targets not yet correlated once cancellation is requested."""
    report = [FileEntry.model_validate(entry) for entry in _report()]
    tree = TestTree()
    node = tree.add_node(kind="feature", file=checkout, line=1)
    cancellation = asyncio.Event()
    cancellation.set()

    verdicts = correlate_report(
        report,
        [RequestedTarget(file=login), RequestedTarget(file=checkout)],
        tree=tree,
        cancellation=cancellation,
    )

    assert [v.status for v in verdicts] == ["failed", "failed"]
    assert verdicts[1].failure_messages[0].text == CANCELLED_MESSAGE
    assert tree.outcome(node).state == "failed"


def test_correlate_report_without_tree(login: str, checkout: str) -> None:
    """Computes verdicts from a shared report without a tree."""
    report = [FileEntry.model_validate(entry) for entry in _report()]

    verdicts = correlate_report(
        report, [RequestedTarget(file=login), RequestedTarget(file=checkout)]
    )

    assert [v.passed for v in verdicts] == [False, True]


def test_correlate_report_relative_target_paints_absolute_tree(
    tmp_path: Path,
) -> None:
    """Paints tree nodes holding absolute paths for a relative target."""
    report = [FileEntry.model_validate(entry) for entry in _report()]
    login = str(tmp_path / FEATURES / "login.feature")
    tree = TestTree()
    root = tree.add_node(kind="feature", file=login, line=1)
    failing = tree.add_node(kind="scenario", file=login, line=10, parent_id=root)

    verdicts = correlate_report(
        report, [RequestedTarget(file=f"{FEATURES}/login.feature")], tree=tree
    )

    assert verdicts[0].status == "failed"
    assert tree.outcome(root).state == "failed"
    assert tree.outcome(failing).state == "failed"


def test_correlate_report_isolates_features_sharing_lines(tmp_path: Path) -> None:
    """Paints only the file in the tree when two files fail and pass at one line."""
    report = [
        FileEntry.model_validate(entry)
        for entry in [
            feature(
                uri="file:features/a/login.feature",
                elements=[passing_scenario(line=5)],
            ),
            feature(
                uri="file:features/b/login.feature",
                elements=[failing_scenario(line=5)],
            ),
        ]
    ]
    first = str(tmp_path / "features/a/login.feature")
    second = str(tmp_path / "features/b/login.feature")
    tree = TestTree()
    root = tree.add_node(kind="feature", file=second, line=1)
    scenario = tree.add_node(kind="scenario", file=second, line=5, parent_id=root)

    verdicts = correlate_report(
        report,
        [RequestedTarget(file=first), RequestedTarget(file=second)],
        tree=tree,
    )

    assert [v.status for v in verdicts] == ["passed", "failed"]
    assert len(tree) == 2
    assert tree.outcome(root).state == "failed"
    assert tree.outcome(scenario).state == "failed"
    assert tree.outcome(scenario).messages[0].line == 7
    assert tree.outcome(scenario).messages[0].file == second
