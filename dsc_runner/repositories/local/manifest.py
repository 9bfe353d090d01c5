"""Local directory profile repository manifest."""

from dsc_runner.repositories.local.config import LocalRepositoryConfig
from dsc_runner.repositories.local.repository import LocalProfileRepository
from dsc_runner.repositories.manifest import RepositoryManifest

local_manifest = RepositoryManifest(
    config_cls=LocalRepositoryConfig,
    repository_factory=LocalProfileRepository.from_config,
)
