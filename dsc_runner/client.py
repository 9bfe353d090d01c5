"""DSC v3 client running ``dsc config test`` and ``dsc config set``."""

import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from dsc_runner.ansi import strip_ansi
from dsc_runner.classifier import classify_output
from dsc_runner.models.result import (
    ExecutionMode,
    ExecutionResult,
    ResourceResult,
    ResourceState,
)
from dsc_runner.process import (
    AsyncProcessRunner,
    ProcessLaunchError,
    ProcessOutput,
    ProcessRunner,
)
from dsc_runner.profiles import derive_profile_name

log = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "dsc"
DEFAULT_TIMEOUT = 600.0


@dataclass(frozen=True, kw_only=True)
class DscClient:
    """Runs DSC against a profile file and classifies the outcome.

    Each call starts its own ``dsc`` process. Cancelling the calling task
    propagates; hitting ``timeout`` or failing to start ``dsc`` produces a
    failed ``ExecutionResult`` instead of an exception.
    """

    runner: ProcessRunner = field(default_factory=AsyncProcessRunner)
    executable: str = DEFAULT_EXECUTABLE
    timeout: float = DEFAULT_TIMEOUT

    async def test(self, file_path: Path) -> ExecutionResult:
        """Check whether the system matches the profile without changing it."""
        return await self._execute(file_path, "test", ExecutionMode.TEST)

    async def apply(self, file_path: Path) -> ExecutionResult:
        """Apply the profile's desired state to the system."""
        return await self._execute(file_path, "set", ExecutionMode.APPLY)

    async def _execute(
        self, file_path: Path, sub_command: str, mode: ExecutionMode
    ) -> ExecutionResult:
        profile_name = derive_profile_name(Path(file_path).name)
        args = [
            "--trace-level",
            "error",
            "config",
            sub_command,
            "--file",
            str(file_path),
        ]

        log.info("Running dsc config %s for profile %s", sub_command, profile_name)
        started = time.monotonic()

        try:
            output = await self.runner.run(self.executable, args, self.timeout)
        except TimeoutError:
            elapsed = _elapsed_since(started)
            log.error(
                "dsc config %s for %s timed out after %.0fs",
                sub_command,
                profile_name,
                self.timeout,
            )
            return failed_result(
                profile_name,
                mode,
                elapsed,
                f"DSC operation timed out after {self.timeout / 60:g} minutes",
            )
        except ProcessLaunchError as e:
            log.error("Could not start %s: %s", self.executable, e)
            return failed_result(profile_name, mode, _elapsed_since(started), str(e))

        return build_result(output, profile_name, mode, _elapsed_since(started))


def build_result(
    output: ProcessOutput,
    profile_name: str,
    mode: ExecutionMode,
    elapsed: timedelta,
) -> ExecutionResult:
    """Build an execution result from a finished DSC process.

    When DSC exits non-zero, reports no resources and writes to stderr, the
    stripped stderr is surfaced as a failed ``dsc`` resource.
    """
    results = classify_output(output.stdout, mode)
    success = output.exit_code == 0

    if not success and not results and output.stderr.strip():
        log.warning(
            "dsc exited with code %d without results for %s",
            output.exit_code,
            profile_name,
        )
        results.append(
            ResourceResult(
                name="dsc",
                type="error",
                state=ResourceState.FAILED,
                error_message=strip_ansi(output.stderr).strip(),
            )
        )

    return ExecutionResult(
        profile_name=profile_name,
        mode=mode,
        success=success,
        results=tuple(results),
        duration=elapsed,
    )


def failed_result(
    profile_name: str,
    mode: ExecutionMode,
    elapsed: timedelta,
    error_message: str,
) -> ExecutionResult:
    """Build a failed result with a single synthetic ``execution`` resource."""
    return ExecutionResult(
        profile_name=profile_name,
        mode=mode,
        success=False,
        results=(
            ResourceResult(
                name="execution",
                type="error",
                state=ResourceState.FAILED,
                error_message=error_message,
            ),
        ),
        duration=elapsed,
    )


def _elapsed_since(started: float) -> timedelta:
    return timedelta(seconds=time.monotonic() - started)
