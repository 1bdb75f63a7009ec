"""Abstract base class for launchers of external Cucumber processes."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cucumber_batch.invocation import Invocation

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Completed:
    """The process exited; the report may exist at ``report_path``."""

    report_path: Path
    exit_code: int | None = None


@dataclass(frozen=True, kw_only=True)
class TimedOut:
    """The process did not exit within ``timeout`` seconds."""

    timeout: float


@dataclass(frozen=True, kw_only=True)
class Cancelled:
    """The caller cancelled the run before the process exited."""


type RunOutcome = Completed | TimedOut | Cancelled


@dataclass(frozen=True, kw_only=True)
class ProcessLauncher[T](ABC):
    """Abstract base for launchers.

    Generic type T is the launch state, whatever the launcher needs to pass
    from ``launch`` to ``wait_for_exit`` and ``terminate`` (typically the
    process handle).
    """

    @abstractmethod
    async def launch(self, invocation: Invocation) -> T:
        """Start the external run and return its launch state.

        Args:
            invocation: Feature selectors, report path and run name

        Returns:
            Launch state to pass to wait_for_exit and terminate

        """

    @abstractmethod
    async def wait_for_exit(self, state: T) -> int | None:
        """Wait until the process exits and return its exit code."""

    @abstractmethod
    async def terminate(self, state: T) -> None:
        """Stop the process if it is still running."""

    async def wait_for_termination(
        self,
        state: T,
        invocation: Invocation,
        timeout: float = 600,
        cancellation: asyncio.Event | None = None,
    ) -> RunOutcome:
        """Wait for the run to end, be cancelled or time out.

        Resolves exactly once. When the process exits at the same moment the
        timeout or cancellation fires, the exit wins.

        Args:
            state: State returned from launch
            invocation: Invocation the state was launched for
            timeout: Maximum wait time in seconds (default: 10 minutes)
            cancellation: Event set by the caller to abandon the run

        Returns:
            Completed, TimedOut or Cancelled

        """
        exit_task = asyncio.ensure_future(self.wait_for_exit(state))
        waiters: set[asyncio.Future[Any]] = {exit_task}
        cancel_task: asyncio.Future[Any] | None = None
        if cancellation is not None:
            cancel_task = asyncio.ensure_future(cancellation.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if exit_task in done:
            exit_code = exit_task.result()
            log.info("%s exited with code %s", invocation.run_name, exit_code)
            return Completed(report_path=invocation.report_path, exit_code=exit_code)

        await self.terminate(state)

        if cancel_task is not None and cancel_task in done:
            log.warning("%s was cancelled", invocation.run_name)
            return Cancelled()

        log.warning("%s did not finish within %s seconds", invocation.run_name, timeout)
        return TimedOut(timeout=timeout)
