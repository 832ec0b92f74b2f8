"""Retrieves raw playlist text for the channel cache."""

from __future__ import annotations

import logging

from ..utils.http_client import HttpClient


class PlaylistFetcher:
    """Downloads a playlist source through the shared :class:`HttpClient`.

    Any failure surfaces as :class:`~acelist.utils.http_client.FetchError`.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._client = http_client

    async def fetch(self, address: str) -> str:
        logging.info("Downloading playlist %s", address)
        return await self._client.fetch_text_async(address)
