"""Pydantic models for GitHub Contents API responses."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, TypeAdapter


class ContentItem(BaseModel):
    """An entry of a directory listing from the GitHub Contents API."""

    name: str
    path: str
    type: Literal["file", "dir", "symlink", "submodule"]
    download_url: str | None = None


ContentListing = TypeAdapter(Sequence[ContentItem])
