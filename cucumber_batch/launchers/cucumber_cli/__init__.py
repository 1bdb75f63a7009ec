"""Cucumber CLI launcher module."""

from cucumber_batch.launchers.cucumber_cli.config import CucumberCliConfig
from cucumber_batch.launchers.cucumber_cli.launcher import CucumberCliLauncher
from cucumber_batch.launchers.cucumber_cli.manifest import cucumber_cli_manifest

__all__ = ["CucumberCliConfig", "CucumberCliLauncher", "cucumber_cli_manifest"]
