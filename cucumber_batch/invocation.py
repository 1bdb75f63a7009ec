"""Construction of a single external invocation covering a batch."""

import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from cucumber_batch.config import BatchSettings
from cucumber_batch.models.target import RequestedTarget

RUN_NAME_PREFIX = "Cucumber: "


@dataclass(frozen=True, kw_only=True)
class Invocation:
    """Everything a launcher needs to start one Cucumber run."""

    project_root: Path
    feature_paths: Sequence[str]
    report_path: Path
    console_log_path: Path
    run_name: str


def build_invocation(
    targets: Sequence[RequestedTarget], settings: BatchSettings
) -> Invocation:
    """Build one invocation whose selectors are the union of all targets."""
    if not targets:
        raise ValueError("At least one target is required")

    report_dir = settings.resolved_report_dir
    stamp = time.time_ns() // 1_000_000
    report_path = report_dir / f".cucumber-result-{stamp}.json"

    feature_paths: list[str] = []
    for target in targets:
        path = target.cucumber_path(settings.project_root)
        if path not in feature_paths:
            feature_paths.append(path)

    return Invocation(
        project_root=settings.project_root,
        feature_paths=feature_paths,
        report_path=report_path,
        console_log_path=report_path.with_suffix(".log"),
        run_name=run_name(targets),
    )


def run_name(targets: Sequence[RequestedTarget]) -> str:
    """Describe a batch the way it is shown to the user."""
    if len(targets) == 1:
        return RUN_NAME_PREFIX + targets[0].describe()
    return f"{RUN_NAME_PREFIX}All Features ({len(targets)} files)"
