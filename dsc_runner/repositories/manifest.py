"""Repository manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from dsc_runner.repositories.base import ProfileRepository, RepositoryError

ConfigT = TypeVar("ConfigT", bound=BaseModel)


class InvalidRepositoryConfigError(RepositoryError):
    """Raised when repository configuration does not validate."""


@dataclass(frozen=True, kw_only=True)
class RepositoryManifest(Generic[ConfigT]):
    """Manifest describing a profile repository plugin.

    Pairs the plugin's configuration model with a factory that opens the
    repository, and any sessions it needs, as an async context manager.
    """

    config_cls: type[ConfigT]
    repository_factory: Callable[
        [ConfigT], AbstractAsyncContextManager[ProfileRepository]
    ]

    def parse_config(self, raw_config: str) -> ConfigT:
        """Validate a JSON configuration document for this repository.

        Raises:
            InvalidRepositoryConfigError: If the document is not valid JSON
                or does not match ``config_cls``

        """
        try:
            return self.config_cls.model_validate_json(raw_config)
        except ValidationError as e:
            raise InvalidRepositoryConfigError(
                f"Invalid {self.config_cls.__name__}: {e}"
            ) from e

    def open(self, raw_config: str) -> AbstractAsyncContextManager[ProfileRepository]:
        """Open the repository described by a JSON configuration document."""
        return self.repository_factory(self.parse_config(raw_config))
