"""Cucumber CLI launcher manifest."""

from cucumber_batch.launchers.cucumber_cli.config import CucumberCliConfig
from cucumber_batch.launchers.cucumber_cli.launcher import CucumberCliLauncher
from cucumber_batch.launchers.manifest import LauncherManifest

cucumber_cli_manifest = LauncherManifest(
    config_cls=CucumberCliConfig,
    launcher_factory=CucumberCliLauncher.from_config,
)
