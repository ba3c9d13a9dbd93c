"""
Post text extraction from mirror markup with ordered fallback rules.

Mirrors render the same post with different markup, so extraction is a chain
of rules tried in priority order:
1. Known structural selectors (most specific first)
2. Document-level description metadata
3. Generic class-substring selectors
4. A last-resort scan for the first line of plausible post length

Each rule is a pure function of the parsed document returning candidate text
or None. The first candidate longer than the configured minimum wins.
"""

from __future__ import annotations

from typing import Callable

from bs4 import BeautifulSoup

from ..config import ExtractConfig
from ..core.errors import ExtractionError, FallbackExhausted
from ..core.fallback import first_success

Rule = Callable[[BeautifulSoup], "str | None"]

_CHALLENGE_MARKERS = (
    "javascript is disabled",
    "please enable javascript",
    "enable javascript to continue",
    "verifying you are human",
    "verifying your browser",
    "just a moment...",
    "checking your browser before accessing",
)


def selector_rule(selector: str, min_length: int) -> Rule:
    """Rule returning the first element matching ``selector`` with enough text."""

    def _rule(soup: BeautifulSoup) -> str | None:
        for element in soup.select(selector):
            text = element.get_text().strip()
            if len(text) > min_length:
                return text
        return None

    _rule.__name__ = f"selector:{selector}"
    return _rule


def meta_rule(key: str) -> Rule:
    """Rule returning the content of ``<meta property=key>`` or ``<meta name=key>``."""

    def _rule(soup: BeautifulSoup) -> str | None:
        tag = soup.find("meta", attrs={"property": key}) or soup.find("meta", attrs={"name": key})
        if tag is None:
            return None
        content = tag.get("content")
        return content.strip() if isinstance(content, str) else None

    _rule.__name__ = f"meta:{key}"
    return _rule


def line_rule(min_length: int, max_length: int) -> Rule:
    """Rule returning the first document line whose length lies strictly inside the band."""

    def _rule(soup: BeautifulSoup) -> str | None:
        for line in _document_lines(soup):
            if min_length < len(line) < max_length:
                return line
        return None

    _rule.__name__ = "lines"
    return _rule


def build_rules(cfg: ExtractConfig) -> list[Rule]:
    """Build the ordered rule list from configuration."""
    rules: list[Rule] = [selector_rule(s, cfg.min_text_length) for s in cfg.selectors]
    rules += [meta_rule(key) for key in cfg.meta_tags]
    rules += [selector_rule(s, cfg.min_text_length) for s in cfg.generic_selectors]
    rules.append(line_rule(cfg.line_min_length, cfg.line_max_length))
    return rules


class ContentExtractor:
    """Locates the primary post text inside retrieved markup."""

    def __init__(self, cfg: ExtractConfig | None = None, rules: list[Rule] | None = None):
        self.cfg = cfg or ExtractConfig()
        self.rules = rules if rules is not None else build_rules(self.cfg)

    def extract_text(self, markup: str) -> str:
        """Return the post text found by the first rule that yields usable text.

        Raises:
            ExtractionError: If no rule produced acceptable text
        """
        soup = BeautifulSoup(markup or "", "html.parser")

        def _attempt(rule: Rule) -> str:
            text = rule(soup)
            if not text or len(text) <= self.cfg.min_text_length:
                raise ExtractionError(f"{rule.__name__}: no match")
            if is_placeholder_text(text):
                raise ExtractionError(f"{rule.__name__}: placeholder page")
            return text

        try:
            return first_success(self.rules, _attempt, errors=ExtractionError)
        except FallbackExhausted as exc:
            raise ExtractionError("Could not parse post text") from exc


def is_placeholder_text(text: str) -> bool:
    """Detect bot-check and JavaScript-required interstitials served with a 200."""
    lowered = text.lower()
    if any(marker in lowered for marker in _CHALLENGE_MARKERS):
        return True
    # Cloudflare footers appear on real pages too; only short ones are challenges
    return "ray id:" in lowered and len(text.strip()) < 1000


def _document_lines(soup: BeautifulSoup) -> list[str]:
    # Work on a copy so rules stay side-effect free on the shared soup
    doc = BeautifulSoup(str(soup), "html.parser")
    for tag in doc(["script", "style", "noscript", "head"]):
        tag.decompose()
    text = doc.get_text(separator="\n")
    return [line.strip() for line in text.splitlines() if line.strip()]
