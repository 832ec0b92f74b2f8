"""Models describing a request configuration and the cache snapshot built for it."""

from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from .channel_models import Channel

CACHE_KEY_SEPARATOR = "::"
NO_SUBSTITUTION_KEY = "original"


class Configuration(BaseModel):
    """Playlist source plus the optional address that replaces the loopback literal."""

    model_config = ConfigDict(frozen=True)

    source: str
    substitution_target: Optional[str] = None

    @field_validator("source")
    @classmethod
    def _require_source(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("source must not be blank")
        return value

    @field_validator("substitution_target")
    @classmethod
    def _normalize_target(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value.strip() == "":
            return None
        return value.strip()

    @property
    def cache_key(self) -> str:
        return f"{self.source}{CACHE_KEY_SEPARATOR}{self.substitution_target or NO_SUBSTITUTION_KEY}"


class CacheEntry(BaseModel):
    """Point-in-time snapshot of a parsed playlist."""

    model_config = ConfigDict(frozen=True)

    key: str
    channels: Tuple[Channel, ...]
    fetched_at: float
