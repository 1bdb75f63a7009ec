"""Launcher manifest model."""

from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel

from cucumber_batch.launchers.base import ProcessLauncher


@dataclass(frozen=True, kw_only=True)
class LauncherManifest[ConfigT: BaseModel, StateT]:
    """Manifest describing a launcher plugin.

    The manifest contains references to the configuration class and the
    launcher factory so launchers can be loaded lazily by key.
    """

    config_cls: type[ConfigT]
    launcher_factory: Callable[[ConfigT], ProcessLauncher[StateT]]
