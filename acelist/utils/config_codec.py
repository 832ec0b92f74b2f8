"""Encodes a :class:`Configuration` into a single URL path segment and back."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Optional

from ..models import Configuration

SOURCE_FIELD = "m3u"
TARGET_FIELD = "ip"


class MalformedToken(ValueError):
    """Raised when a path segment is not a configuration token."""


class ConfigCodec:
    """Turns configurations into opaque base64url tokens.

    Tokens carry compact JSON (``{"m3u": ..., "ip": ...}``) with the trailing
    ``=`` padding removed, so they only use ``[A-Za-z0-9_-]``.  A token that
    omits the source resolves to ``default_source``.
    """

    def __init__(self, default_source: str) -> None:
        self.default_source = default_source

    def encode(self, config: Configuration) -> str:
        payload = {SOURCE_FIELD: config.source, TARGET_FIELD: config.substitution_target}
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")

    def decode(self, token: str) -> Configuration:
        if not token:
            raise MalformedToken("empty token")
        padded = token + "=" * (-len(token) % 4)
        try:
            raw = base64.b64decode(padded, altchars=b"-_", validate=True)
            payload = json.loads(raw.decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
            raise MalformedToken(f"not a configuration token: {token!r}") from exc

        if not isinstance(payload, dict) or not (SOURCE_FIELD in payload or TARGET_FIELD in payload):
            raise MalformedToken(f"token does not describe a configuration: {token!r}")

        source = payload.get(SOURCE_FIELD)
        target = payload.get(TARGET_FIELD)
        for value in (source, target):
            if value is not None and not isinstance(value, str):
                raise MalformedToken(f"token holds a non-text field: {token!r}")

        if not source or not source.strip():
            source = self.default_source
        return Configuration(source=source, substitution_target=target)

    def try_decode(self, segment: str) -> Optional[Configuration]:
        """Returns the decoded configuration, or ``None`` when ``segment`` is an ordinary path."""

        try:
            return self.decode(segment)
        except MalformedToken:
            logging.debug("Segment %r is not a configuration token", segment)
            return None
