"""Command line interface for Watcher Report."""

from .main import app

__all__ = ["app"]
