"""Abstract base class for profile repositories."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from dsc_runner.models.profile import ProfileSummary


class RepositoryError(Exception):
    """Raised when a repository cannot serve a request."""


class ProfileNotFoundError(RepositoryError):
    """Raised when a requested profile does not exist in the repository."""


@dataclass(frozen=True, kw_only=True)
class ProfileRepository(ABC):
    """Source of DSC configuration profiles.

    Implementations fetch from a remote service or a local directory;
    ``CachingProfileRepository`` wraps any of them with a local file cache.
    """

    @abstractmethod
    async def list_profiles(self) -> Sequence[ProfileSummary]:
        """Return the profiles available in the repository, in listing order."""

    @abstractmethod
    async def get_profile_content(self, file_name: str) -> str:
        """Return the full YAML content of a profile.

        Args:
            file_name: Profile file name, optionally with a relative path

        Raises:
            ProfileNotFoundError: If the profile does not exist

        """

    async def invalidate_cache(self) -> None:
        """Drop locally cached data. Repositories without a cache do nothing."""
