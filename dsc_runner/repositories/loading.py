"""Discovery of profile repository plugins through entry points."""

from importlib.metadata import entry_points
from typing import Any

from dsc_runner.repositories.base import RepositoryError
from dsc_runner.repositories.manifest import RepositoryManifest

ENTRY_POINT_GROUP = "dsc_runner.repositories"


class RepositoryNotFoundError(RepositoryError):
    """Raised when no repository plugin is registered under a key."""


def available_repositories() -> list[str]:
    """Return the sorted keys of all installed repository plugins."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_repository_manifest(key: str) -> RepositoryManifest[Any]:
    """Load the manifest registered under ``key``.

    Raises:
        RepositoryNotFoundError: If no plugin is registered under ``key``, or
            the registered object is not a ``RepositoryManifest``

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    if not matches:
        raise RepositoryNotFoundError(
            f"Repository '{key}' not found. "
            f"Available repositories: {', '.join(available_repositories())}"
        )

    entry = next(iter(matches))
    manifest = entry.load()
    if not isinstance(manifest, RepositoryManifest):
        raise RepositoryNotFoundError(
            f"Entry point '{key}' ({entry.value}) is not a repository manifest"
        )
    return manifest
