"""CLI entry point for batch Cucumber runs."""

import argparse
import asyncio
import json
import logging
import signal
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from cucumber_batch.config import DEFAULT_TIMEOUT, BatchSettings
from cucumber_batch.launchers.loading import available_launchers, load_launcher_manifest
from cucumber_batch.models.result import TargetVerdict
from cucumber_batch.models.target import RequestedTarget
from cucumber_batch.models.tree import NodeSpec
from cucumber_batch.orchestrator import (
    BatchOrchestrator,
    BatchResult,
    correlate_report,
)
from cucumber_batch.report_loader import ReportError, cleanup_report, load_report
from cucumber_batch.target_loader import load_targets, parse_target
from cucumber_batch.tree import TestTree

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}

_TREE_ADAPTER = TypeAdapter(list[NodeSpec])


def log_results_summary(
    log: logging.Logger, verdicts: Sequence[TargetVerdict]
) -> None:
    """Log a formatted summary of target verdicts with failure messages."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for verdict in verdicts:
        symbol = STATUS_SYMBOLS.get(verdict.status, "?")
        log.info("%s %s: %s", symbol, _selector(verdict.target), verdict.status)
        if not verdict.matched_in_report:
            log.info("  Not found in report")
        for message in verdict.failure_messages:
            first_line = message.text.splitlines()[0] if message.text else ""
            if message.location_line is not None:
                log.info("  Line %d: %s", message.location_line, first_line)
            else:
                log.info("  Message: %s", first_line)


def format_output(
    verdicts: Sequence[TargetVerdict], tree: TestTree | None = None
) -> dict[str, Any]:
    """Format target verdicts (and painted tree nodes) for JSON output."""
    results = [
        {
            "file": verdict.target.file,
            "scenario_line": verdict.target.scenario_line,
            "example_line": verdict.target.example_line,
            "status": verdict.status,
            "matched_in_report": verdict.matched_in_report,
            "failures": [
                {"text": m.text, "line": m.location_line}
                for m in verdict.failure_messages
            ],
        }
        for verdict in verdicts
    ]

    output: dict[str, Any] = {
        "total": len(results),
        "passed": sum(1 for r in results if r["status"] == "passed"),
        "failed": sum(1 for r in results if r["status"] == "failed"),
        "results": results,
    }
    if tree is not None:
        output["nodes"] = tree.snapshot()
    return output


async def collect_targets(
    selectors: Sequence[str], targets_file: Path | None
) -> Sequence[RequestedTarget]:
    """Combine targets from selectors and an optional targets file."""
    targets = [parse_target(selector) for selector in selectors]
    if targets_file is not None:
        targets.extend(await load_targets(targets_file))
    return targets


def load_tree(tree_file: Path | None) -> TestTree | None:
    """Load a test tree from a JSON list of node specifications."""
    if tree_file is None:
        return None
    specs = _TREE_ADAPTER.validate_json(tree_file.read_bytes())
    return TestTree.from_specs(specs)


async def run(
    launcher_key: str,
    launcher_config_json: str,
    settings: BatchSettings,
    targets: Sequence[RequestedTarget],
    tree: TestTree | None = None,
    keep_report: bool = False,
) -> int:
    """Run targets in one batch and return exit code."""
    log = logging.getLogger("cucumber_batch")

    if not targets:
        log.error("No targets requested, pass --target or --targets-file")
        return 2

    log.info("Loading launcher: %s", launcher_key)
    manifest = load_launcher_manifest(launcher_key)

    config_dict = json.loads(launcher_config_json)
    config = manifest.config_cls(**config_dict)
    orchestrator = BatchOrchestrator(
        launcher=manifest.launcher_factory(config), settings=settings
    )

    cancellation = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancellation.set)
        handles_sigint = True
    except NotImplementedError:
        log.debug("Signal handlers are not supported on this platform")
        handles_sigint = False

    try:
        result = await orchestrator.run_batch(targets, tree, cancellation)
    finally:
        if handles_sigint:
            loop.remove_signal_handler(signal.SIGINT)

    return _report(log, result, tree, keep_report)


def correlate(
    report_path: Path,
    settings: BatchSettings,
    targets: Sequence[RequestedTarget],
    tree: TestTree | None = None,
) -> int:
    """Correlate an existing report with targets and return exit code."""
    log = logging.getLogger("cucumber_batch")

    if not targets:
        log.error("No targets requested, pass --target or --targets-file")
        return 2

    try:
        report = load_report(report_path)
    except ReportError as e:
        log.error("%s", e)
        return 2

    verdicts = correlate_report(
        report,
        targets,
        tree=tree,
        unmatched_file_policy=settings.unmatched_file_policy,
    )
    log_results_summary(log, verdicts)
    print(json.dumps(format_output(verdicts, tree), indent=2))
    return 0 if all(verdict.passed for verdict in verdicts) else 1


def _report(
    log: logging.Logger, result: BatchResult, tree: TestTree | None, keep: bool
) -> int:
    log_results_summary(log, result.verdicts)
    output = format_output(result.verdicts, tree)
    output["report_available"] = result.report_available
    print(json.dumps(output, indent=2))

    if result.report_path is not None and not keep:
        cleanup_report(result.report_path)

    return 0 if result.passed else 1


def _selector(target: RequestedTarget) -> str:
    parts = [target.file]
    if target.scenario_line is not None:
        parts.append(str(target.scenario_line))
    if target.example_line is not None:
        parts.append(str(target.example_line))
    return ":".join(parts)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--target",
        action="append",
        default=[],
        help="Target selector file[:scenario_line[:example_line]] (repeatable)",
    )
    parser.add_argument(
        "--targets-file",
        type=Path,
        default=None,
        help="YAML file listing targets",
    )
    parser.add_argument(
        "--tree",
        type=Path,
        default=None,
        help="JSON file describing the test tree to record verdicts on",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path("."),
        help="Project directory Cucumber runs in",
    )
    parser.add_argument(
        "--unmatched-file-policy",
        choices=["pass", "fail"],
        default="pass",
        help="Status of targets whose feature file is missing from the report",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run Cucumber targets in one batch and correlate the results"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Launch Cucumber and correlate")
    _add_common_arguments(run_parser)
    run_parser.add_argument(
        "--launcher",
        required=True,
        help=f"Launcher key ({', '.join(available_launchers())})",
    )
    run_parser.add_argument(
        "--launcher-config",
        default="{}",
        help="JSON configuration for the launcher",
    )
    run_parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Directory for the report file (default: <project-root>/target)",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help="Seconds to wait for the run to finish",
    )
    run_parser.add_argument(
        "--keep-report",
        action="store_true",
        help="Keep the report file after correlation",
    )

    correlate_parser = subparsers.add_parser(
        "correlate", help="Correlate an existing Cucumber JSON report"
    )
    _add_common_arguments(correlate_parser)
    correlate_parser.add_argument(
        "--report",
        type=Path,
        required=True,
        help="Cucumber JSON report to read",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    targets = asyncio.run(collect_targets(args.target, args.targets_file))
    tree = load_tree(args.tree)

    if args.command == "correlate":
        settings = BatchSettings(
            project_root=args.project_root,
            unmatched_file_policy=args.unmatched_file_policy,
        )
        sys.exit(correlate(args.report, settings, targets, tree))

    settings = BatchSettings(
        project_root=args.project_root,
        report_dir=args.report_dir,
        timeout=args.timeout,
        unmatched_file_policy=args.unmatched_file_policy,
    )
    exit_code = asyncio.run(
        run(
            launcher_key=args.launcher,
            launcher_config_json=args.launcher_config,
            settings=settings,
            targets=targets,
            tree=tree,
            keep_report=args.keep_report,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
