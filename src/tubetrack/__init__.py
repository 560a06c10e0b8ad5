"""Tubetrack: AI summaries for YouTube learning playlists."""

__version__ = "0.1.0"

__all__ = ["__version__"]
