"""Parsing of free-form input text into post references."""

from __future__ import annotations

import re

from .types import PostReference

# Tried in order; the first pattern that matches a line wins.
ID_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:mobile\.)?twitter\.com/\w+/status/(\d+)"),
    re.compile(r"x\.com/\w+/status/(\d+)"),
    re.compile(r"nitter\.net/\w+/status/(\d+)"),
    re.compile(r"xcancel\.com/\w+/status/(\d+)"),
    re.compile(r"/status/(\d+)"),
]


def extract_identifiers(text: str) -> list[PostReference]:
    """Parse newline-separated links into unique post references.

    Blank lines and lines matching no pattern are dropped. Duplicates are
    detected by numeric id, and the first occurrence keeps its source line.

    Args:
        text: Raw input, one link per line

    Returns:
        References in first-seen order

    Examples:
        >>> extract_identifiers("https://x.com/a/status/1\\nnope")
        [PostReference(source_url='https://x.com/a/status/1', id='1')]
    """
    refs: list[PostReference] = []
    seen: set[str] = set()
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed:
            continue
        post_id = _match_id(trimmed)
        if post_id is None or post_id in seen:
            continue
        seen.add(post_id)
        refs.append(PostReference(source_url=trimmed, id=post_id))
    return refs


def _match_id(line: str) -> str | None:
    for pattern in ID_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return None
