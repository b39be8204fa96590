"""Top-level package for the note store service."""

__version__ = "0.1.0"

__all__ = ["__version__"]
