"""Maven launcher manifest."""

from cucumber_batch.launchers.manifest import LauncherManifest
from cucumber_batch.launchers.maven.config import MavenConfig
from cucumber_batch.launchers.maven.launcher import MavenLauncher

maven_manifest = LauncherManifest(
    config_cls=MavenConfig,
    launcher_factory=MavenLauncher.from_config,
)
