"""Profile repository backed by a local directory."""

from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from dsc_runner.models.profile import ProfileSummary
from dsc_runner.profiles import PROFILE_SUFFIX, derive_profile_name
from dsc_runner.repositories.base import (
    ProfileNotFoundError,
    ProfileRepository,
    RepositoryError,
)
from dsc_runner.repositories.local.config import LocalRepositoryConfig


@dataclass(frozen=True, kw_only=True)
class LocalProfileRepository(ProfileRepository):
    """Reads profiles from a directory, e.g. a checkout of a profile repo."""

    config: LocalRepositoryConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: LocalRepositoryConfig
    ) -> AsyncGenerator["LocalProfileRepository", None]:
        """Create repository for the configured directory."""
        yield cls(config=config)

    async def list_profiles(self) -> Sequence[ProfileSummary]:
        """List ``*.dsc.yaml`` files sorted by file name."""
        try:
            paths = sorted(self.config.path.iterdir())
        except OSError as e:
            raise RepositoryError(
                f"Failed to list profiles in {self.config.path}: {e}"
            ) from e

        return [
            ProfileSummary(file_name=path.name, name=derive_profile_name(path.name))
            for path in paths
            if path.is_file() and path.name.lower().endswith(PROFILE_SUFFIX)
        ]

    async def get_profile_content(self, file_name: str) -> str:
        """Read a profile below the configured directory."""
        root = self.config.path.resolve()
        profile_path = (root / file_name).resolve()

        if not profile_path.is_relative_to(root) or not profile_path.is_file():
            raise ProfileNotFoundError(f"Profile not found: {file_name}")

        return profile_path.read_text(encoding="utf-8")
