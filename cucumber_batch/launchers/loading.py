"""Loading of launchers from entry points."""

import logging
from importlib.metadata import entry_points
from typing import Any

from cucumber_batch.launchers.manifest import LauncherManifest

log = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "cucumber_batch.launchers"


class LauncherNotFoundError(Exception):
    """Raised when no launcher is registered under a key."""


def available_launchers() -> list[str]:
    """Return the sorted keys of every registered launcher."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_launcher_manifest(key: str) -> LauncherManifest[Any, Any]:
    """Load a launcher manifest by key.

    Args:
        key: Entry point name in the ``cucumber_batch.launchers`` group
             (e.g., "cucumber-cli", "maven")

    Returns:
        The launcher manifest instance

    Raises:
        LauncherNotFoundError: If no launcher with the given key is found
        TypeError: If the entry point does not refer to a LauncherManifest

    """
    matches = list(entry_points(group=ENTRY_POINT_GROUP, name=key))
    if not matches:
        raise LauncherNotFoundError(
            f"Launcher '{key}' not found. Available launchers: {available_launchers()}"
        )
    if len(matches) > 1:
        log.warning(
            "Launcher '%s' is registered %d times, using %s",
            key,
            len(matches),
            matches[0].value,
        )

    manifest = matches[0].load()
    if not isinstance(manifest, LauncherManifest):
        raise TypeError(
            f"Entry point {matches[0].value} is not a LauncherManifest "
            f"(got {type(manifest).__name__})"
        )
    log.debug("Loaded launcher '%s' from %s", key, matches[0].value)
    return manifest
