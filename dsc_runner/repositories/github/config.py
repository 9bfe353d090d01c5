"""Configuration for the GitHub profile repository."""

from pydantic import BaseModel, SecretStr


class GitHubRepositoryConfig(BaseModel):
    """Configuration for the GitHub profile repository."""

    owner: str = "atc-net"
    repo: str = "atc-dsc-configurations"
    ref: str = "main"
    path: str = "configurations"
    # Anonymous access works for public repositories but is rate limited
    token: SecretStr | None = None
    api_base_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"
