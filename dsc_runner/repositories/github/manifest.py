"""Entry point for the GitHub profile repository."""

from dsc_runner.repositories.github.config import GitHubRepositoryConfig
from dsc_runner.repositories.github.repository import GitHubProfileRepository
from dsc_runner.repositories.manifest import RepositoryManifest

# Registered as ``github`` in pyproject.toml.
github_manifest = RepositoryManifest(
    config_cls=GitHubRepositoryConfig,
    repository_factory=GitHubProfileRepository.from_config,
)
