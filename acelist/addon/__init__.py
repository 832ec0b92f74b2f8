"""HTTP add-on layer: request routing and response shaping."""

from .app import create_app

__all__ = ["create_app"]
