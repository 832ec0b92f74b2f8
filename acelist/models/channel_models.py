"""Pydantic model for a single playlist entry."""

from pydantic import BaseModel, ConfigDict


class Channel(BaseModel):
    """One parsed playlist entry with its fallbacks already applied."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    group: str
    logo: str
    url: str
