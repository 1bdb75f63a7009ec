"""Pydantic models for the Cucumber JSON report format."""

from collections.abc import Sequence

from pydantic import Field

from cucumber_batch.models.base import Model

type StepStatus = str

PASSED = "passed"
SKIPPED = "skipped"
NO_RESULT = "no result"


class ExecutionResult(Model):
    """Outcome attached to a step or hook."""

    status: StepStatus = NO_RESULT
    error_message: str | None = None


class HookMatch(Model):
    """Glue code location a hook was matched to."""

    location: str | None = None


class HookEntry(Model):
    """A Before or After hook executed around a scenario."""

    match: HookMatch | None = None
    result: ExecutionResult | None = None

    @property
    def location(self) -> str:
        """Hook glue location, or a placeholder when the report omits it."""
        if self.match is None or not self.match.location:
            return "Unknown location"
        return self.match.location

    @property
    def failed(self) -> bool:
        """Whether the hook reported a status other than passed.

        Hooks without any result are not considered failed.
        """
        return self.result is not None and self.result.status != PASSED

    def failure_message(self) -> str:
        """Describe the hook failure with its location and error text."""
        result = self.result or ExecutionResult()
        error = result.error_message or f"Hook failed with status: {result.status}"
        return f"Hook Location: {self.location}\n\n{error}"


class StepEntry(Model):
    """A single Gherkin step and its execution result."""

    name: str = ""
    keyword: str = ""
    line: int | None = None
    result: ExecutionResult | None = None

    @property
    def status(self) -> StepStatus:
        """Step status, ``no result`` when the report carries none."""
        if self.result is None:
            return NO_RESULT
        return self.result.status

    @property
    def error_message(self) -> str | None:
        """Error text reported for the step, if any."""
        return self.result.error_message if self.result else None


class ElementEntry(Model):
    """A background, scenario or example row reported under a feature."""

    type: str | None = None
    name: str = ""
    line: int | None = None
    steps: Sequence[StepEntry] = Field(default_factory=list)
    before: Sequence[HookEntry] = Field(default_factory=list)
    after: Sequence[HookEntry] = Field(default_factory=list)

    @property
    def is_background(self) -> bool:
        """Backgrounds narrate fixtures and are never test results."""
        return self.type == "background"


class FileEntry(Model):
    """All elements reported for one feature file."""

    uri: str | None = None
    id: str | None = None
    name: str = ""
    elements: Sequence[ElementEntry] = Field(default_factory=list)

    @property
    def identity(self) -> str:
        """Path-like identity of the feature file as written by Cucumber."""
        return self.uri or self.id or ""


type BatchReport = Sequence[FileEntry]
