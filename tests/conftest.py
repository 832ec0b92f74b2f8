from __future__ import annotations

import asyncio
from typing import List, Optional

import pytest

from acelist.utils.http_client import FetchError

SAMPLE_PLAYLIST = """#EXTM3U
#EXTINF:-1 tvg-logo="http://x/logo.png" group-title="Sports",Channel One
http://127.0.0.1:8080/stream1
#EXTINF:-1 group-title="News",Channel Two
http://127.0.0.1:6878/ace/getstream?id=abc
#EXTINF:-1 tvg-logo="" ,Channel Three
acestream://0123456789abcdef
"""


class FakeFetcher:
    """Serves canned playlist text and counts calls; ``gate`` holds fetches until set."""

    def __init__(self, text: str = SAMPLE_PLAYLIST, fail_with: Optional[int] = None) -> None:
        self.text = text
        self.fail_with = fail_with
        self.calls: List[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, address: str) -> str:
        self.calls.append(address)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise FetchError(address, status=self.fail_with)
        return self.text


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
