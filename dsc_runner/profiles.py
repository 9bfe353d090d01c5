"""Helpers for profile file names and staging profiles for execution."""

import logging
import re
from pathlib import Path, PurePosixPath

from dsc_runner.paths import default_staging_dir
from dsc_runner.repositories.base import ProfileRepository

log = logging.getLogger(__name__)

PROFILE_SUFFIX = ".dsc.yaml"
DEFAULT_FILE_SUFFIX = "-configuration.dsc.yaml"

_DSC_MARKER = re.compile(re.escape(".dsc"), re.IGNORECASE)


def resolve_profile_file_name(profile: str) -> str:
    """Map a profile name to its file name.

    ``dev`` becomes ``dev-configuration.dsc.yaml``; names that already end
    in ``.dsc.yaml`` are returned unchanged.
    """
    if profile.lower().endswith(PROFILE_SUFFIX):
        return profile
    return f"{profile}{DEFAULT_FILE_SUFFIX}"


def derive_profile_name(file_name: str) -> str:
    """Derive a display name such as ``dev configuration`` from a file name."""
    stem = PurePosixPath(file_name.replace("\\", "/")).stem
    stem = _DSC_MARKER.sub("", stem)
    return stem.replace("-", " ").replace("_", " ")


def sanitize_file_name(file_name: str) -> str:
    """Reduce a file name or path to its last segment.

    Both ``/`` and ``\\`` count as separators, so ``../../etc/passwd`` and
    ``C:\\temp\\x.yaml`` become ``passwd`` and ``x.yaml``.

    Raises:
        ValueError: If nothing usable remains (empty, ``.`` or ``..``)

    """
    safe_name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    if safe_name in {"", ".", ".."}:
        raise ValueError(f"Invalid file name: {file_name!r}")
    return safe_name


def clear_staging_dir(staging_dir: Path | None = None) -> None:
    """Remove profiles left behind by earlier runs."""
    staging_dir = staging_dir or default_staging_dir()
    if not staging_dir.is_dir():
        return

    for path in staging_dir.iterdir():
        try:
            path.unlink()
        except OSError as e:
            log.debug("Could not remove staged file %s: %s", path, e)


async def stage_profile(
    repository: ProfileRepository,
    file_name: str,
    staging_dir: Path | None = None,
) -> Path:
    """Fetch a profile and write it where the DSC process can read it.

    Returns:
        Path of the staged profile file

    """
    safe_name = sanitize_file_name(file_name)
    content = await repository.get_profile_content(file_name)

    staging_dir = staging_dir or default_staging_dir()
    staging_dir.mkdir(parents=True, exist_ok=True)
    staged_path = staging_dir / safe_name
    staged_path.write_text(content, encoding="utf-8")

    log.debug("Staged profile %s at %s", file_name, staged_path)
    return staged_path
