"""Shared HTTP helpers for downloading remote playlists."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp
import requests

USER_AGENT = "acelist/0.1 (+https://github.com/acelist)"

DEFAULT_HEADERS: Dict[str, str] = {
    "user-agent": USER_AGENT,
    "accept": "*/*",
}


class FetchError(Exception):
    """Raised when a playlist source answers with an error status or cannot be reached."""

    def __init__(self, address: str, status: Optional[int] = None, cause: Optional[BaseException] = None) -> None:
        self.address = address
        self.status = status
        self.cause = cause
        if status is not None:
            message = f"HTTP {status} from {address}"
        else:
            message = f"Network error fetching {address}: {cause}"
        super().__init__(message)


class HttpClient:
    """Fetches playlist text either synchronously (requests) or from the event loop (aiohttp)."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)

        self._async_session: Optional[aiohttp.ClientSession] = None
        self._async_lock: Optional[asyncio.Lock] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def fetch_text(self, url: str) -> str:
        """Fetch a remote resource as text, blocking the caller."""

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logging.error("GET %s failed: %s", url, exc)
            raise FetchError(url, cause=exc) from exc

        if response.status_code >= 400:
            logging.error("GET %s returned HTTP %s", url, response.status_code)
            raise FetchError(url, status=response.status_code)
        return response.text

    async def fetch_text_async(self, url: str) -> str:
        """Fetch a remote resource as text on the running event loop."""

        session = await self._get_async_session()
        try:
            async with session.get(url) as resp:
                if resp.status >= 400:
                    raise FetchError(url, status=resp.status)
                # Playlists often arrive without a charset; undecodable bytes become U+FFFD.
                return await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(url, cause=exc) from exc

    async def _get_async_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()
        if self._async_session:
            if (
                self._async_session.closed
                or not self._loop
                or self._loop.is_closed()
                or self._loop is not current_loop
            ):
                await self._shutdown_async_session()
                self._async_lock = None

        if self._async_lock is None:
            self._async_lock = asyncio.Lock()

        async with self._async_lock:
            if self._async_session and not self._async_session.closed:
                return self._async_session
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._async_session = aiohttp.ClientSession(
                timeout=timeout,
                headers=DEFAULT_HEADERS.copy(),
            )
            self._loop = current_loop
        return self._async_session

    async def _shutdown_async_session(self) -> None:
        session = self._async_session
        self._async_session = None
        self._loop = None
        if session and not session.closed:
            try:
                await session.close()
            except RuntimeError as exc:  # session bound to a loop that is gone
                logging.debug("Discarding aiohttp session: %s", exc)

    async def aclose(self) -> None:
        await self._shutdown_async_session()
        self._session.close()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
