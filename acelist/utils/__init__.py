"""Utility helpers for HTTP access and configuration tokens."""

from .config_codec import ConfigCodec, MalformedToken
from .http_client import FetchError, HttpClient

__all__ = ["ConfigCodec", "MalformedToken", "FetchError", "HttpClient"]
