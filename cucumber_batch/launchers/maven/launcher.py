"""Launcher running Cucumber through the Maven Surefire test phase."""

from collections.abc import Sequence
from dataclasses import dataclass

from cucumber_batch.invocation import Invocation
from cucumber_batch.launchers.maven.config import MavenConfig
from cucumber_batch.launchers.process import SubprocessLauncher


@dataclass(frozen=True, kw_only=True)
class MavenLauncher(SubprocessLauncher):
    """Runs all selectors of a batch through one Maven build."""

    config: MavenConfig

    @classmethod
    def from_config(cls, config: MavenConfig) -> "MavenLauncher":
        """Create launcher from its configuration."""
        return cls(config=config)

    def build_command(self, invocation: Invocation) -> Sequence[str]:
        """Build the ``mvn test -Dcucumber...`` command line."""
        config = self.config
        command = [config.maven_executable, "-B", *config.goals]
        command.append(f"-Dcucumber.features={','.join(invocation.feature_paths)}")
        command.append(f"-Dcucumber.plugin=pretty,json:{invocation.report_path}")
        if config.glue:
            command.append(f"-Dcucumber.glue={','.join(config.glue)}")
        if config.object_factory:
            command.append(f"-Dcucumber.object-factory={config.object_factory}")
        command += config.extra_args
        return command
