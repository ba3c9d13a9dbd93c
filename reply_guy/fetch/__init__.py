"""
Post fetching and extraction.

This package handles HTTP fetching across mirror hosts and
locating post text in the returned markup.
"""

from .extractor import ContentExtractor, build_rules, is_placeholder_text
from .fetcher import FetchResult, MirrorFailure, MirrorFetcher, fetch_url

__all__ = [
    "fetch_url",
    "FetchResult",
    "MirrorFailure",
    "MirrorFetcher",
    "ContentExtractor",
    "build_rules",
    "is_placeholder_text",
]
