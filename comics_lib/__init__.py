"""Shared library for the daily comics downloader.

This package contains the pieces the canonical runner wires together:
- fetch.py: listing URL building and strip URL resolution
- parse.py: markup and JSON feed extractors
- download.py: image download and persistence
- sources.py: the source registry
- config.py: comics_config.json loading
"""

# No exports needed - import directly from submodules
__all__ = []
