"""Settings shared by every batch run, independent of the launcher."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, PositiveFloat

DEFAULT_TIMEOUT = 600.0


class BatchSettings(BaseModel):
    """Configuration for one batch invocation.

    ``unmatched_file_policy`` decides the status of a target whose feature
    file is missing from an otherwise valid report.
    """

    project_root: Path = Field(default=Path("."), description="Project directory")
    report_dir: Path | None = Field(
        default=None,
        description="Directory for report files (defaults to <project_root>/target)",
    )
    timeout: PositiveFloat = Field(
        default=DEFAULT_TIMEOUT, description="Seconds to wait for the run to end"
    )
    unmatched_file_policy: Literal["pass", "fail"] = "pass"

    @property
    def resolved_report_dir(self) -> Path:
        """Directory the report and console log are written to."""
        if self.report_dir is not None:
            return self.report_dir
        return self.project_root / "target"
