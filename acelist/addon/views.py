"""Shapes cached channels into add-on protocol responses."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .. import __version__
from ..models import Channel, Configuration
from ..playlist.m3u_parser import CHANNEL_ID_PREFIX

CONTENT_TYPE = "AceStream"
CATALOG_ID = "acelist"
ALL_GENRES = "All"
CATALOG_PAGE_SIZE = 100


def genres(channels: Iterable[Channel]) -> List[str]:
    return [ALL_GENRES, *sorted({channel.group for channel in channels})]


def build_manifest(config: Configuration, channels: Sequence[Channel], default_source: str) -> Dict[str, Any]:
    """Manifest for one configuration; the id differs per target so clients can install several."""

    safe_target = (config.substitution_target or "default").replace(".", "-")
    source_label = "Default" if config.source == default_source else config.source
    catalog_genres = genres(channels)
    return {
        "id": f"org.acelist.{safe_target}",
        "version": __version__,
        "name": f"AceList ({config.substitution_target})" if config.substitution_target else "AceList (Default)",
        "description": f"Source: {source_label}",
        "resources": ["catalog", "meta", "stream"],
        "types": [CONTENT_TYPE],
        "catalogs": [
            {
                "type": CONTENT_TYPE,
                "id": CATALOG_ID,
                "name": "AceList",
                "extra": [
                    {"name": "genre", "isRequired": False, "options": catalog_genres},
                    {"name": "search"},
                    {"name": "skip"},
                ],
                "genres": catalog_genres,
            }
        ],
        "idPrefixes": [CHANNEL_ID_PREFIX],
    }


def _skip(extra: Mapping[str, str]) -> int:
    try:
        return max(int(extra.get("skip") or 0), 0)
    except ValueError:
        logging.debug("Ignoring invalid skip value %r", extra.get("skip"))
        return 0


def filter_channels(channels: Sequence[Channel], extra: Mapping[str, str]) -> List[Channel]:
    """Search beats genre; ``All`` (or no genre) keeps every channel."""

    search = (extra.get("search") or "").strip().lower()
    genre = (extra.get("genre") or "").strip()
    if search:
        return [channel for channel in channels if search in channel.name.lower()]
    if genre and genre != ALL_GENRES:
        return [channel for channel in channels if channel.group == genre]
    return list(channels)


def build_catalog(channels: Sequence[Channel], extra: Mapping[str, str]) -> Dict[str, Any]:
    results = filter_channels(channels, extra)
    start = _skip(extra)
    page = results[start : start + CATALOG_PAGE_SIZE]
    logging.info("Catalog request genre=%r search=%r -> %s results", extra.get("genre"), extra.get("search"), len(results))
    metas = [
        {
            "id": channel.id,
            "type": CONTENT_TYPE,
            "name": channel.name,
            "poster": channel.logo,
            "description": channel.group,
        }
        for channel in page
    ]
    return {"metas": metas}


def find_channel(channels: Sequence[Channel], channel_id: str) -> Optional[Channel]:
    return next((channel for channel in channels if channel.id == channel_id), None)


def build_meta(config: Configuration, channel: Optional[Channel]) -> Dict[str, Any]:
    if channel is None:
        return {"meta": None}
    return {
        "meta": {
            "id": channel.id,
            "type": CONTENT_TYPE,
            "name": channel.name,
            "poster": channel.logo,
            "background": channel.logo,
            "description": f"Group: {channel.group}\nTarget: {config.substitution_target or 'Original'}",
            "behaviorHints": {"isLive": True},
        }
    }


def build_streams(config: Configuration, channel: Optional[Channel]) -> Dict[str, Any]:
    if channel is None:
        return {"streams": []}
    return {
        "streams": [
            {
                "url": channel.url,
                "title": f"Watch on {config.substitution_target or 'Original'}",
                "behaviorHints": {"notWebReady": True},
            }
        ]
    }
