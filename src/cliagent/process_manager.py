"""Lifecycle management of the CLI subprocess."""

from __future__ import annotations

import asyncio
import codecs
import logging
import re
from typing import AsyncIterator, Callable, Sequence

from .errors import ClaudeServiceError
from .models import AvailabilityResult
from .constants import (
    DEFAULT_CLI_PATH,
    DEFAULT_PROBE_TIMEOUT_MS,
    DEFAULT_READ_SIZE,
    TERMINATE_GRACE_SECONDS,
)

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"(\d+\.\d+\.\d+)")


class ProcessManager:
    """Runs one CLI process at a time and streams its standard output.

    Args:
        cli_path: Path or name of the CLI executable.
    """

    def __init__(self, cli_path: str = DEFAULT_CLI_PATH) -> None:
        self.cli_path = cli_path
        self._current_process: asyncio.subprocess.Process | None = None

    @property
    def is_running(self) -> bool:
        """Whether a process started by ``spawn`` is still held."""
        return self._current_process is not None

    async def spawn(
        self,
        args: Sequence[str],
        *,
        cwd: str | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout_ms: int | None = None,
    ) -> AsyncIterator[str]:
        """Start the CLI and yield its standard output as text chunks.

        Chunks are yielded as they are read, one at a time. Output is never
        buffered as a whole. Setting ``cancel_event`` or reaching the timeout
        sends SIGTERM to the process.

        Args:
            args: Arguments passed after the executable.
            cwd: Working directory of the process.
            cancel_event: Event that requests termination when set.
            timeout_ms: Milliseconds after which the process is terminated.

        Yields:
            str: Decoded chunks of standard output, in arrival order.

        Raises:
            ClaudeServiceError: ``UNKNOWN`` if the process cannot be started,
                ``CANCELLED`` if it was cancelled or timed out, ``CLI_ERROR``
                if it exited with a non-zero code.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.cli_path,
                *args,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            raise ClaudeServiceError(
                f"Failed to start {self.cli_path}: {exc}", "UNKNOWN"
            ) from exc

        self._current_process = process
        logger.info("Started %s (pid %s)", self.cli_path, process.pid)

        stop_reason: str | None = None

        def request_stop(reason: str) -> None:
            nonlocal stop_reason
            if stop_reason is None:
                stop_reason = reason
                logger.info("Terminating pid %s (%s)", process.pid, reason)
            self._terminate(process)

        watcher: asyncio.Task | None = None
        if cancel_event is not None:
            if cancel_event.is_set():
                request_stop("cancelled")
            else:
                watcher = asyncio.create_task(self._watch_cancel(cancel_event, request_stop))

        timer: asyncio.TimerHandle | None = None
        if timeout_ms:
            timer = asyncio.get_running_loop().call_later(
                timeout_ms / 1000, request_stop, "timeout"
            )

        # Drained concurrently so a chatty stderr cannot block the process
        stderr_task = asyncio.create_task(process.stderr.read())
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        try:
            while True:
                data = await process.stdout.read(DEFAULT_READ_SIZE)
                if not data:
                    break
                text = decoder.decode(data)
                if text and stop_reason is None:
                    yield text
            tail = decoder.decode(b"", final=True)
            if tail and stop_reason is None:
                yield tail

            exit_code = await process.wait()
            stderr = (await stderr_task).decode("utf-8", errors="replace").strip()
            logger.info("Process %s exited with code %s", process.pid, exit_code)

            if stop_reason == "cancelled":
                raise ClaudeServiceError("Request cancelled", "CANCELLED")
            if stop_reason == "timeout":
                raise ClaudeServiceError(f"Request timed out after {timeout_ms}ms", "CANCELLED")
            if exit_code != 0:
                raise ClaudeServiceError(
                    f"CLI exited with code {exit_code}: {stderr}", "CLI_ERROR"
                )
        finally:
            if watcher is not None:
                watcher.cancel()
            if timer is not None:
                timer.cancel()
            if not stderr_task.done():
                stderr_task.cancel()
            try:
                if process.returncode is None:
                    # Consumer stopped iterating early
                    await self._reap(process)
            finally:
                self._current_process = None

    def kill(self) -> None:
        """Send SIGTERM to the running process, if any. Does not wait."""
        if self._current_process is not None:
            self._terminate(self._current_process)

    async def check_availability(
        self, timeout_ms: int = DEFAULT_PROBE_TIMEOUT_MS
    ) -> AvailabilityResult:
        """Check whether the CLI can be run by calling it with ``--version``.

        The probe runs independently of any process started by ``spawn``.

        Args:
            timeout_ms: Milliseconds to wait for the probe to finish.

        Returns:
            ``AvailabilityResult``: ``available`` is True when the probe exits
                with code 0. ``version`` holds the first semantic version found
                in its combined output.
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.cli_path,
                "--version",
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except (OSError, ValueError) as exc:
            logger.warning("CLI %s could not be started: %s", self.cli_path, exc)
            return AvailabilityResult(available=False)

        try:
            output, _ = await asyncio.wait_for(process.communicate(), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError:
            await self._reap(process)
            logger.warning("CLI %s did not answer --version within %dms", self.cli_path, timeout_ms)
            return AvailabilityResult(available=False)

        if process.returncode != 0:
            logger.warning("CLI %s --version exited with code %s", self.cli_path, process.returncode)
            return AvailabilityResult(available=False)

        match = _VERSION_PATTERN.search(output.decode("utf-8", errors="replace"))
        return AvailabilityResult(available=True, version=match.group(1) if match else None)

    @staticmethod
    async def _watch_cancel(
        cancel_event: asyncio.Event, on_cancel: Callable[[str], None]
    ) -> None:
        await cancel_event.wait()
        on_cancel("cancelled")

    @classmethod
    async def _reap(cls, process: asyncio.subprocess.Process) -> None:
        cls._terminate(process)
        try:
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Pid %s ignored SIGTERM, killing", process.pid)
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()

    @staticmethod
    def _terminate(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.terminate()
        except ProcessLookupError:
            # Exited between the check and the signal
            pass
