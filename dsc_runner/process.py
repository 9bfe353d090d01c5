"""Child process execution for the DSC command line."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, cast

log = logging.getLogger(__name__)


class ProcessLaunchError(Exception):
    """Raised when the operating system cannot start a process."""


@dataclass(frozen=True, kw_only=True)
class ProcessOutput:
    """Buffered output of a finished process."""

    exit_code: int
    stdout: str
    stderr: str


class ProcessRunner(Protocol):
    """Interface for running an external command to completion."""

    async def run(
        self, command: str, args: Sequence[str], timeout: float
    ) -> ProcessOutput:
        """Run a command and return its exit code and buffered output.

        Raises:
            ProcessLaunchError: If the process could not be started
            TimeoutError: If the process did not finish within ``timeout``
                seconds. Cancelling the calling task raises
                ``asyncio.CancelledError`` instead.

        """
        ...


@dataclass(frozen=True, kw_only=True)
class AsyncProcessRunner:
    """Runs commands with asyncio subprocesses and buffers all output."""

    encoding: str = "utf-8"

    async def run(
        self, command: str, args: Sequence[str], timeout: float
    ) -> ProcessOutput:
        """Run a command without stdin and kill it on timeout or cancellation."""
        log.debug("Starting process: %s %s", command, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessLaunchError(
                f"Failed to start '{command}': {e.strerror or e}"
            ) from e

        try:
            async with asyncio.timeout(timeout):
                stdout, stderr = await process.communicate()
        except (asyncio.CancelledError, TimeoutError):
            await _kill(process)
            raise

        exit_code = cast(int, process.returncode)
        log.debug("Process %s exited with code %d", command, exit_code)
        return ProcessOutput(
            exit_code=exit_code,
            stdout=stdout.decode(self.encoding, errors="replace"),
            stderr=stderr.decode(self.encoding, errors="replace"),
        )


async def _kill(process: asyncio.subprocess.Process) -> None:
    """Kill a still-running process and reap it."""
    if process.returncode is not None:
        return

    with contextlib.suppress(ProcessLookupError):
        process.kill()
    await process.wait()
