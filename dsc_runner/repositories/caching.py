"""File cache in front of any profile repository."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from dsc_runner.models.profile import ProfileSummary
from dsc_runner.paths import default_cache_dir
from dsc_runner.profiles import sanitize_file_name
from dsc_runner.repositories.base import ProfileRepository

log = logging.getLogger(__name__)

INDEX_FILE_NAME = "profiles-index.json"
DEFAULT_TTL = timedelta(hours=1)

_PROFILE_LIST = TypeAdapter(list[ProfileSummary])


@dataclass(frozen=True, kw_only=True)
class CachingProfileRepository(ProfileRepository):
    """Stores fetched listings and profiles on disk for ``ttl``.

    A single lock serialises every operation, so at most one upstream fetch
    is in flight at a time and cache files are never written concurrently.
    The cache directory is owned by this repository and created on init.
    """

    inner: ProfileRepository
    cache_dir: Path = field(default_factory=default_cache_dir)
    ttl: timedelta = DEFAULT_TTL
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Create the cache directory."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    async def list_profiles(self) -> Sequence[ProfileSummary]:
        """Return the cached listing, refreshing it from upstream when stale.

        An index that cannot be decoded, or decodes to an empty listing, is
        treated as a cache miss.
        """
        async with self._lock:
            index_path = self.cache_dir / INDEX_FILE_NAME

            if self.is_fresh(index_path) and (cached := _read_index(index_path)):
                log.debug("Profile listing served from cache")
                return cached

            log.info("Fetching profile listing from upstream")
            profiles = await self.inner.list_profiles()
            index_path.write_bytes(_PROFILE_LIST.dump_json(list(profiles), indent=2))
            return profiles

    async def get_profile_content(self, file_name: str) -> str:
        """Return cached profile content, fetching it from upstream when stale.

        The cache file is named after the last path segment of ``file_name``
        only, while upstream receives ``file_name`` unchanged. A cached file
        that is not valid UTF-8 is treated as a miss.

        Raises:
            ValueError: If ``file_name`` has no usable last segment, or names
                the listing index

        """
        async with self._lock:
            safe_name = sanitize_file_name(file_name)
            if safe_name == INDEX_FILE_NAME:
                raise ValueError(f"Invalid file name: {file_name}")
            cached_path = self.cache_dir / safe_name

            if self.is_fresh(cached_path) and (
                cached := _read_content(cached_path)
            ) is not None:
                log.debug("Profile %s served from cache", safe_name)
                return cached

            log.info("Fetching profile %s from upstream", file_name)
            content = await self.inner.get_profile_content(file_name)
            cached_path.write_text(content, encoding="utf-8")
            return content

    async def invalidate_cache(self) -> None:
        """Delete every cached file, skipping files that cannot be removed."""
        async with self._lock:
            if not self.cache_dir.is_dir():
                return

            for path in self.cache_dir.iterdir():
                if not path.is_file():
                    continue
                try:
                    path.unlink()
                except OSError as e:
                    # File may be locked by another process.
                    log.debug("Could not delete cache file %s: %s", path, e)

            log.info("Profile cache cleared: %s", self.cache_dir)

    def is_fresh(self, path: Path) -> bool:
        """Return whether ``path`` exists and was written within the TTL."""
        if self.ttl <= timedelta(0):
            return False

        try:
            modified = path.stat().st_mtime
        except OSError:
            return False

        age = datetime.now(timezone.utc) - datetime.fromtimestamp(modified, timezone.utc)
        return age <= self.ttl


def _read_index(index_path: Path) -> list[ProfileSummary] | None:
    try:
        return _PROFILE_LIST.validate_json(index_path.read_bytes())
    except (OSError, ValidationError) as e:
        log.debug("Ignoring unreadable profile index %s: %s", index_path, e)
        return None


def _read_content(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.debug("Ignoring unreadable cached profile %s: %s", path, e)
        return None
