"""Serve a remote M3U channel list as a catalog with per-request address substitution."""

__version__ = "0.1.0"
