"""Profiles read from a directory on the local file system."""

from dsc_runner.repositories.local.config import LocalRepositoryConfig
from dsc_runner.repositories.local.repository import LocalProfileRepository

__all__ = ["LocalProfileRepository", "LocalRepositoryConfig"]
