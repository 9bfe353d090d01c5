"""Base model configuration for all pydantic data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen base model that tolerates unknown fields in external payloads."""

    model_config = ConfigDict(frozen=True, extra="ignore")
