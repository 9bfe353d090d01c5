"""Detection of the runtime environment: elevation and DSC availability."""

import ctypes
import logging
import os
import sys
from dataclasses import dataclass

from dsc_runner.process import (
    AsyncProcessRunner,
    ProcessLaunchError,
    ProcessRunner,
)

log = logging.getLogger(__name__)

VERSION_PROBE_TIMEOUT = 10.0


@dataclass(frozen=True, kw_only=True)
class EnvironmentInfo:
    """Snapshot of the environment taken before running profiles."""

    is_admin: bool
    dsc_available: bool
    dsc_version: str | None = None


async def detect_environment(
    runner: ProcessRunner | None = None, executable: str = "dsc"
) -> EnvironmentInfo:
    """Check elevation and probe the DSC executable."""
    available, version = await probe_version(runner or AsyncProcessRunner(), executable)
    return EnvironmentInfo(
        is_admin=is_admin(),
        dsc_available=available,
        dsc_version=version,
    )


async def probe_version(
    runner: ProcessRunner, executable: str
) -> tuple[bool, str | None]:
    """Run ``<executable> --version``.

    Returns:
        Whether the executable ran successfully, and its version if reported

    """
    try:
        output = await runner.run(executable, ["--version"], VERSION_PROBE_TIMEOUT)
    except (ProcessLaunchError, TimeoutError) as e:
        log.debug("Version probe for %s failed: %s", executable, e)
        return False, None

    if output.exit_code != 0:
        log.debug("%s --version exited with code %d", executable, output.exit_code)
        return False, None

    return True, extract_version(output.stdout)


def extract_version(output: str) -> str | None:
    """Extract the version from output such as ``dsc 3.2.0-preview.11``."""
    trimmed = output.strip()
    if not trimmed:
        return None

    _, separator, version = trimmed.partition(" ")
    return version.lstrip() if separator else trimmed


def is_admin() -> bool:
    """Return whether the current process runs elevated."""
    if sys.platform == "win32":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0
