"""Tests for the local directory profile repository."""

from pathlib import Path

import pytest

from dsc_runner.repositories.base import ProfileNotFoundError, RepositoryError
from dsc_runner.repositories.local import LocalProfileRepository, LocalRepositoryConfig


@pytest.fixture
def profiles_dir(tmp_path: Path) -> Path:
    """Create a directory with a few profiles."""
    directory = tmp_path / "configurations"
    directory.mkdir()
    (directory / "web-dev.dsc.yaml").write_text("web")
    (directory / "base-configuration.dsc.yaml").write_text("base")
    (directory / "README.md").write_text("docs")
    (directory / "nested.dsc.yaml").mkdir()
    return directory


@pytest.fixture
def repository(profiles_dir: Path) -> LocalProfileRepository:
    """Create repository for the profiles directory."""
    return LocalProfileRepository(config=LocalRepositoryConfig(path=profiles_dir))


async def test_lists_profile_files_sorted(repository: LocalProfileRepository) -> None:
    """Lists only *.dsc.yaml files, sorted by name."""
    profiles = await repository.list_profiles()

    assert [(p.file_name, p.name) for p in profiles] == [
        ("base-configuration.dsc.yaml", "base configuration"),
        ("web-dev.dsc.yaml", "web dev"),
    ]


async def test_missing_directory_raises(tmp_path: Path) -> None:
    """Raises RepositoryError when the directory does not exist."""
    repository = LocalProfileRepository(
        config=LocalRepositoryConfig(path=tmp_path / "missing")
    )

    with pytest.raises(RepositoryError, match="Failed to list profiles"):
        await repository.list_profiles()


async def test_reads_profile_content(repository: LocalProfileRepository) -> None:
    """Reads the content of a profile."""
    assert await repository.get_profile_content("web-dev.dsc.yaml") == "web"


@pytest.mark.parametrize(
    "file_name", ["missing.dsc.yaml", "../outside.dsc.yaml", "nested.dsc.yaml"]
)
async def test_unknown_profile_raises(
    repository: LocalProfileRepository, profiles_dir: Path, file_name: str
) -> None:
    """Raises ProfileNotFoundError for missing files or paths outside the root."""
    (profiles_dir.parent / "outside.dsc.yaml").write_text("secret")

    with pytest.raises(ProfileNotFoundError):
        await repository.get_profile_content(file_name)


async def test_from_config_yields_repository(profiles_dir: Path) -> None:
    """Creates repository through the async factory."""
    config = LocalRepositoryConfig(path=profiles_dir)

    async with LocalProfileRepository.from_config(config) as repository:
        profiles = await repository.list_profiles()

    assert len(profiles) == 2
