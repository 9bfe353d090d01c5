"""Models for DSC configuration profiles."""

from pydantic import Field

from dsc_runner.models.base import Model


class ProfileSummary(Model):
    """Lightweight profile metadata returned by a repository listing."""

    file_name: str = Field(..., description="Profile file name (e.g. dev.dsc.yaml)")
    name: str = Field(..., description="Human-readable profile name")
    description: str | None = Field(default=None, description="Optional summary")
