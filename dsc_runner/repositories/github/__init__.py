"""Profiles served from a directory of a GitHub repository."""

from dsc_runner.repositories.github.config import GitHubRepositoryConfig
from dsc_runner.repositories.github.repository import GitHubProfileRepository

__all__ = ["GitHubProfileRepository", "GitHubRepositoryConfig"]
