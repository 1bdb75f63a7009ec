"""Launcher running Cucumber as a local subprocess."""

import asyncio
import logging
from abc import abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from cucumber_batch.invocation import Invocation
from cucumber_batch.launchers.base import ProcessLauncher

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class SubprocessLauncher(ProcessLauncher[asyncio.subprocess.Process]):
    """Base for launchers that spawn a local command.

    Standard error is merged into standard output and the combined console
    output is written next to the report, so a failed run can point the user
    at it.
    """

    @abstractmethod
    def build_command(self, invocation: Invocation) -> Sequence[str]:
        """Return the argv that runs every feature selector of the invocation."""

    async def launch(self, invocation: Invocation) -> asyncio.subprocess.Process:
        """Spawn the command in the project root."""
        command = self.build_command(invocation)
        invocation.report_path.parent.mkdir(parents=True, exist_ok=True)
        log.info("Starting %s", invocation.run_name)
        log.debug("Command: %s", " ".join(command))

        console_log = invocation.console_log_path.open("wb")
        try:
            return await asyncio.create_subprocess_exec(
                *command,
                cwd=invocation.project_root,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=console_log,
                stderr=asyncio.subprocess.STDOUT,
            )
        finally:
            console_log.close()

    async def wait_for_exit(self, state: asyncio.subprocess.Process) -> int | None:
        """Wait for the process to exit."""
        return await state.wait()

    async def terminate(self, state: asyncio.subprocess.Process) -> None:
        """Kill the process and reap it."""
        if state.returncode is not None:
            return
        log.info("Killing process %d", state.pid)
        try:
            state.kill()
        except ProcessLookupError:
            log.debug("Process %d already exited", state.pid)
        await state.wait()
