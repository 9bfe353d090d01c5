"""Configuration for the local directory profile repository."""

from pathlib import Path

from pydantic import BaseModel


class LocalRepositoryConfig(BaseModel):
    """Configuration for the local directory profile repository."""

    path: Path
