"""Tools for parsing M3U playlists into channel records and writing them back."""

from __future__ import annotations

import hashlib
import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import Channel
from ..settings import DEFAULT_GROUP, DEFAULT_LOGO, LOOPBACK_ADDRESS

EXTINF_PREFIX = "#EXTINF:"
CHANNEL_ID_PREFIX = "ace_"
LOGO_ATTRIBUTE = "tvg-logo"
GROUP_ATTRIBUTE = "group-title"

ATTRIBUTE_PATTERN = re.compile(r'([\w-]+)="([^"]*)"')
DURATION_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")


class ParseError(ValueError):
    """Raised for a single metadata line that cannot be turned into an entry."""


def channel_id(name: str) -> str:
    return CHANNEL_ID_PREFIX + hashlib.md5(name.encode("utf-8")).hexdigest()


def substitute_loopback(url: str, target: Optional[str]) -> str:
    """Replaces every loopback literal in ``url`` with ``target`` when one is given."""

    if not target or not target.strip():
        return url
    return url.replace(LOOPBACK_ADDRESS, target.strip())


def _find_separator(body: str) -> int:
    in_quotes = False
    separator = -1
    for index, char in enumerate(body):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            separator = index
    if in_quotes:
        # Unbalanced quotes hide the real separator; fall back to the last comma.
        return body.rfind(",")
    return separator


def _split_extinf(line: str) -> Tuple[Dict[str, str], str]:
    body = line[len(EXTINF_PREFIX):]
    separator = _find_separator(body)
    if separator < 0:
        raise ParseError(f"missing name separator: {line!r}")

    head = body[:separator].strip()
    name = body[separator + 1:].strip()
    parts = head.split(None, 1)
    duration = parts[0] if parts else ""
    attribute_text = parts[1] if len(parts) > 1 else ""
    if not DURATION_PATTERN.fullmatch(duration):
        raise ParseError(f"invalid duration {duration!r}: {line!r}")
    if not name:
        raise ParseError(f"blank channel name: {line!r}")

    attributes = {key: value for key, value in ATTRIBUTE_PATTERN.findall(attribute_text)}
    return attributes, name


class M3UParser:
    """Converts raw M3U text into an ordered tuple of :class:`Channel` records.

    Parsing is a single pass: an ``#EXTINF`` line opens a pending entry and the
    next non-comment line becomes its address.  Bad metadata lines are skipped
    and never abort the pass.
    """

    def __init__(self, default_logo: str = DEFAULT_LOGO, default_group: str = DEFAULT_GROUP) -> None:
        self.default_logo = default_logo
        self.default_group = default_group

    def parse(self, text: str, substitution_target: Optional[str] = None) -> Tuple[Channel, ...]:
        channels: List[Channel] = []
        pending: Optional[Tuple[Dict[str, str], str]] = None
        skipped = 0

        for raw_line in text.lstrip("\ufeff").splitlines():
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith(EXTINF_PREFIX):
                try:
                    pending = _split_extinf(line)
                except ParseError as exc:
                    logging.debug("Skipping playlist entry: %s", exc)
                    pending = None
                    skipped += 1
                continue
            if line.startswith("#") or pending is None:
                continue

            attributes, name = pending
            channels.append(self._build_channel(attributes, name, line, substitution_target))
            pending = None

        if skipped:
            logging.warning("Skipped %s malformed playlist entries", skipped)
        return tuple(channels)

    def _build_channel(
        self,
        attributes: Dict[str, str],
        name: str,
        url: str,
        substitution_target: Optional[str],
    ) -> Channel:
        logo = attributes.get(LOGO_ATTRIBUTE, "").strip() or self.default_logo
        group = attributes.get(GROUP_ATTRIBUTE, "").strip() or self.default_group
        return Channel(
            id=channel_id(name),
            name=name,
            group=group,
            logo=logo,
            url=substitute_loopback(url, substitution_target),
        )


def render_m3u(channels: Iterable[Channel]) -> str:
    """Writes channels back out as an extended M3U playlist."""

    lines = ["#EXTM3U"]
    for channel in channels:
        lines.append(
            f'{EXTINF_PREFIX}-1 {LOGO_ATTRIBUTE}="{channel.logo}" {GROUP_ATTRIBUTE}="{channel.group}",{channel.name}'
        )
        lines.append(channel.url)
    return "\n".join(lines) + "\n"
