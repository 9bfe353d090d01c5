"""GitHub profile repository implementation."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import aiohttp
from pydantic import ValidationError

from dsc_runner.models.profile import ProfileSummary
from dsc_runner.profiles import PROFILE_SUFFIX, derive_profile_name
from dsc_runner.repositories.base import (
    ProfileNotFoundError,
    ProfileRepository,
    RepositoryError,
)
from dsc_runner.repositories.github.config import GitHubRepositoryConfig
from dsc_runner.repositories.github.models import ContentListing

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class GitHubProfileRepository(ProfileRepository):
    """Reads profiles from a directory of a GitHub repository.

    Listings come from the Contents API, file content from the raw download
    host so large profiles are not subject to the API's base64 encoding.
    """

    config: GitHubRepositoryConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubRepositoryConfig
    ) -> AsyncGenerator["GitHubProfileRepository", None]:
        """Create repository with managed session lifecycle."""
        headers = {"Accept": "application/vnd.github+json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"

        async with aiohttp.ClientSession(headers=headers) as session:
            yield cls(config=config, session=session)

    async def list_profiles(self) -> Sequence[ProfileSummary]:
        """List ``*.dsc.yaml`` files in the configured directory."""
        url = (
            f"{self.config.api_base_url}/repos/{self.config.owner}/{self.config.repo}"
            f"/contents/{self.config.path}"
        )
        log.info(
            "Listing profiles: owner=%s, repo=%s, path=%s, ref=%s",
            self.config.owner,
            self.config.repo,
            self.config.path,
            self.config.ref,
        )

        try:
            async with self.session.get(
                url, params={"ref": self.config.ref}
            ) as response:
                if response.status != 200:
                    text = await response.text()
                    raise RepositoryError(
                        f"Failed to list profiles: {response.status} {text}"
                    )
                data = await response.json()
        except (aiohttp.ClientError, ValueError) as e:
            raise RepositoryError(f"Failed to list profiles from {url}: {e}") from e

        try:
            items = ContentListing.validate_python(data)
        except ValidationError as e:
            raise RepositoryError(f"Unexpected profile listing from {url}: {e}") from e

        return [
            ProfileSummary(file_name=item.name, name=derive_profile_name(item.name))
            for item in items
            if item.type == "file" and item.name.lower().endswith(PROFILE_SUFFIX)
        ]

    async def get_profile_content(self, file_name: str) -> str:
        """Download a profile from the raw content host."""
        url = (
            f"{self.config.raw_base_url}/{self.config.owner}/{self.config.repo}"
            f"/{self.config.ref}/{self.config.path}/{file_name}"
        )
        log.debug("Downloading profile %s from %s", file_name, url)

        try:
            async with self.session.get(url) as response:
                if response.status == 404:
                    raise ProfileNotFoundError(f"Profile not found: {file_name}")
                if response.status != 200:
                    text = await response.text()
                    raise RepositoryError(
                        f"Failed to download profile {file_name}: "
                        f"{response.status} {text}"
                    )
                return await response.text()
        except aiohttp.ClientError as e:
            raise RepositoryError(
                f"Failed to download profile {file_name}: {e}"
            ) from e
