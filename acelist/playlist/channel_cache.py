"""Time-bounded, single-flight cache of parsed playlists."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Optional, Protocol, Tuple

from ..models import CacheEntry, Channel, Configuration
from ..settings import CACHE_TTL_SECONDS
from ..utils.http_client import FetchError
from .m3u_parser import M3UParser

EMPTY: Tuple[Channel, ...] = ()


class Fetcher(Protocol):
    def fetch(self, address: str) -> Awaitable[str]: ...


class ChannelCache:
    """Maps a configuration to its most recent parse result.

    An entry is fresh for ``ttl`` seconds after it was fetched.  Misses and
    stale entries are refreshed by a single task per key that every concurrent
    caller awaits.  Failures degrade to an empty tuple and keep the stale entry
    so the next call retries; a successful refresh drops the stale entries of
    other keys so the map only holds live configurations.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        parser: Optional[M3UParser] = None,
        ttl: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetcher = fetcher
        self._parser = parser or M3UParser()
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, "asyncio.Task[Tuple[Channel, ...]]"] = {}

    async def get(self, config: Configuration) -> Tuple[Channel, ...]:
        key = config.cache_key
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            return entry.channels

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(key, config))
            self._inflight[key] = task
        return await asyncio.shield(task)

    def peek(self, config: Configuration) -> Optional[CacheEntry]:
        return self._entries.get(config.cache_key)

    def invalidate(self, config: Optional[Configuration] = None) -> None:
        if config is None:
            self._entries.clear()
        else:
            self._entries.pop(config.cache_key, None)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.fetched_at < self.ttl

    def _prune_stale(self) -> None:
        stale = [
            key
            for key, entry in self._entries.items()
            if key not in self._inflight and not self._is_fresh(entry)
        ]
        for key in stale:
            del self._entries[key]
        if stale:
            logging.debug("Dropped %s stale playlist entries", len(stale))

    async def _refresh(self, key: str, config: Configuration) -> Tuple[Channel, ...]:
        try:
            logging.info("Loading playlist for %s (target: %s)", config.source, config.substitution_target or "original")
            try:
                text = await self._fetcher.fetch(config.source)
            except FetchError as exc:
                logging.error("Playlist fetch failed: %s", exc)
                return EMPTY
            except Exception as exc:
                logging.error("Unexpected error fetching %s: %s", config.source, exc)
                return EMPTY

            try:
                channels = self._parser.parse(text, config.substitution_target)
            except Exception as exc:
                logging.error("Playlist from %s could not be parsed: %s", config.source, exc)
                return EMPTY

            entry = CacheEntry(key=key, channels=channels, fetched_at=self._clock())
            self._entries[key] = entry
            self._prune_stale()
            logging.info("Loaded %s channels from %s", len(entry.channels), config.source)
            return entry.channels
        finally:
            self._inflight.pop(key, None)
