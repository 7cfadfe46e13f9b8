"""Base model configuration for wire and sidecar documents."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Immutable model accepting either field names or wire aliases."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
