"""Playlist ingestion: fetching, parsing, and caching channel lists."""

from .channel_cache import ChannelCache
from .fetcher import PlaylistFetcher
from .m3u_parser import M3UParser, ParseError, render_m3u

__all__ = ["ChannelCache", "PlaylistFetcher", "M3UParser", "ParseError", "render_m3u"]
