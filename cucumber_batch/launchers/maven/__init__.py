"""Maven launcher module."""

from cucumber_batch.launchers.maven.config import MavenConfig
from cucumber_batch.launchers.maven.launcher import MavenLauncher
from cucumber_batch.launchers.maven.manifest import maven_manifest

__all__ = ["MavenConfig", "MavenLauncher", "maven_manifest"]
