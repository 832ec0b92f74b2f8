"""Splits add-on request paths into a configuration and a resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from urllib.parse import parse_qs, unquote

from ..models import Configuration
from ..utils.config_codec import ConfigCodec

RESOURCE_SUFFIXES = (".json",)
MANIFEST_FILE = "manifest.json"
MANIFEST_RESOURCE = "manifest"


def strip_suffix(segment: str) -> str:
    for suffix in RESOURCE_SUFFIXES:
        if segment.endswith(suffix):
            return segment[: -len(suffix)]
    return segment


def parse_extra(segment: str) -> Dict[str, str]:
    """Parses a Stremio extra segment such as ``genre=Sports&skip=100``.

    ``segment`` must still be percent-encoded; the first value of each key wins.
    """

    parsed = parse_qs(strip_suffix(segment), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


@dataclass(frozen=True)
class ResourceRequest:
    """A request path resolved against the configuration it carries."""

    config: Configuration
    configured: bool
    segments: List[str] = field(default_factory=list)
    extra: Dict[str, str] = field(default_factory=dict)

    @property
    def kind(self) -> str:
        return self.segments[0] if self.segments else MANIFEST_RESOURCE


def resolve_path(raw_path: str, codec: ConfigCodec, default_config: Configuration) -> ResourceRequest:
    """Resolves a raw (still percent-encoded) request path.

    The first segment is tried as a configuration token; when it does not
    decode, the whole path is an ordinary resource path under ``default_config``.
    """

    raw_segments = [segment for segment in raw_path.split("/") if segment]
    config: Optional[Configuration] = None
    if raw_segments and raw_segments[0] != MANIFEST_FILE:
        config = codec.try_decode(unquote(raw_segments[0]))
    if config is not None:
        raw_segments = raw_segments[1:]

    extra: Dict[str, str] = {}
    # catalog/<type>/<id>/<extra>.json
    if len(raw_segments) == 4 and raw_segments[0] == "catalog":
        extra = parse_extra(raw_segments.pop())

    segments = [unquote(segment) for segment in raw_segments]
    if segments:
        segments[-1] = strip_suffix(segments[-1])
    return ResourceRequest(
        config=config or default_config,
        configured=config is not None,
        segments=segments,
        extra=extra,
    )
