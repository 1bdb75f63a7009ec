"""Models for verdicts computed from a Cucumber report."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from cucumber_batch.models.target import RequestedTarget

type FailureKind = Literal["before_hook", "step", "setup", "empty", "after_hook"]


@dataclass(frozen=True, kw_only=True)
class FailureDetail:
    """The unit that made a scenario fail and where to report it."""

    kind: FailureKind
    label: str
    message: str
    report_line: int

    @property
    def scenario_level(self) -> bool:
        """Hook and setup failures point at the scenario, not at a step."""
        return self.kind != "step"


@dataclass(frozen=True, kw_only=True)
class ScenarioVerdict:
    """Pass/fail outcome of one reported scenario or example row."""

    name: str
    line: int
    passed: bool
    failure: FailureDetail | None = None


@dataclass(frozen=True, kw_only=True)
class FailureMessage:
    """Failure text surfaced for a target, optionally tied to a line."""

    text: str
    location_line: int | None = None


@dataclass(frozen=True, kw_only=True)
class TargetVerdict:
    """Result of one requested target.

    ``matched_in_report`` is False when the report had no entry for the
    target's file, in which case ``status`` follows the configured policy.
    """

    target: RequestedTarget
    status: Literal["passed", "failed"]
    failure_messages: Sequence[FailureMessage] = field(default_factory=tuple)
    matched_in_report: bool = True

    @property
    def passed(self) -> bool:
        """Whether the target passed."""
        return self.status == "passed"
