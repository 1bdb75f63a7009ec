"""Launcher invoking the Cucumber command line runner on the JVM."""

import os
from collections.abc import Sequence
from dataclasses import dataclass

from cucumber_batch.invocation import Invocation
from cucumber_batch.launchers.cucumber_cli.config import CucumberCliConfig
from cucumber_batch.launchers.process import SubprocessLauncher


@dataclass(frozen=True, kw_only=True)
class CucumberCliLauncher(SubprocessLauncher):
    """Runs all selectors of a batch through one ``java`` process."""

    config: CucumberCliConfig

    @classmethod
    def from_config(cls, config: CucumberCliConfig) -> "CucumberCliLauncher":
        """Create launcher from its configuration."""
        return cls(config=config)

    def build_command(self, invocation: Invocation) -> Sequence[str]:
        """Build the ``java ... io.cucumber.core.cli.Main`` command line."""
        config = self.config
        command = [
            config.java_executable,
            *config.vm_args,
            "-cp",
            os.pathsep.join(config.classpath),
            config.main_class,
        ]
        for glue in config.glue:
            command += ["--glue", glue]
        command += ["--plugin", "pretty", "--plugin", f"json:{invocation.report_path}"]
        if config.object_factory:
            command += ["--object-factory", config.object_factory]
        command += invocation.feature_paths
        return command
