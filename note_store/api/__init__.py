"""HTTP surface for the note store."""

from .app import create_app

__all__ = ["create_app"]
