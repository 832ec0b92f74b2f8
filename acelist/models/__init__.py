"""Data models for channels, request configurations, and cache entries."""

from .channel_models import Channel
from .config_models import CacheEntry, Configuration

__all__ = ["Channel", "Configuration", "CacheEntry"]
