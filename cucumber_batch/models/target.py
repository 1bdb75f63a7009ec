"""Models for the targets requested in a batch run."""

from pathlib import Path

from pydantic import Field, PositiveInt, model_validator

from cucumber_batch.models.base import Model


class RequestedTarget(Model):
    """One feature file, scenario or example row the caller asked to run.

    A target with no line runs the whole file. ``scenario_line`` alone selects
    one scenario or outline, and ``example_line`` additionally narrows an
    outline down to a single example row.
    """

    file: str = Field(..., description="Feature file path (absolute or relative)")
    scenario_line: PositiveInt | None = Field(
        default=None, description="Line of the scenario or scenario outline"
    )
    example_line: PositiveInt | None = Field(
        default=None, description="Line of the example row under an outline"
    )

    @model_validator(mode="after")
    def _example_requires_scenario(self) -> "RequestedTarget":
        if self.example_line is not None and self.scenario_line is None:
            raise ValueError("example_line requires scenario_line")
        return self

    @property
    def line(self) -> int | None:
        """Line Cucumber should be pointed at, the example row when present."""
        return self.example_line or self.scenario_line

    def relative_path(self, project_root: Path) -> str:
        """Feature path relative to the project root, with forward slashes."""
        path = Path(self.file)
        root = project_root.resolve()
        if path.is_absolute() and path.is_relative_to(root):
            path = path.relative_to(root)
        return path.as_posix().replace("\\", "/")

    def cucumber_path(self, project_root: Path) -> str:
        """Feature path in Cucumber's ``path[:line]`` selector syntax."""
        relative = self.relative_path(project_root)
        if self.line is None:
            return relative
        return f"{relative}:{self.line}"

    def describe(self) -> str:
        """Short human-readable label for logs and run names."""
        if self.example_line is not None:
            return f"Example at line {self.example_line}"
        if self.scenario_line is not None:
            return f"Scenario at line {self.scenario_line}"
        return Path(self.file).stem


class TargetsDocument(Model):
    """Targets file loaded from YAML."""

    targets: list[RequestedTarget] = Field(
        default_factory=list, description="Targets to run in one batch"
    )
