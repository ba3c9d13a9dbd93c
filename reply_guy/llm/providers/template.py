"""Offline rule-based reply provider.

Picks a canned reply from simple features of the post text. Useful without
API credentials and as a deterministic provider for dry runs.
"""

from __future__ import annotations

import random
import re

from ...core.errors import GenerationError
from .base import ReplyProvider

CANNED_REPLIES = [
    "Interesting take! 🤔",
    "Thanks for sharing this perspective! 👍",
    "This is really thought-provoking. 💭",
    "Great point! I hadn't considered that angle. 👏",
    "Appreciate you bringing this up! 🙏",
    "This resonates with me. ✨",
    "Well said! 🎯",
    "Thanks for the insight! 💡",
    "This is exactly what I needed to hear today! 🌟",
    "You've got a point there! 🔥",
]

TECH_KEYWORDS = ["tech", "technology", "coding", "programming"]
BUSINESS_KEYWORDS = ["business", "startup", "entrepreneur"]
POSITIVE_WORDS = [
    "love", "great", "amazing", "awesome", "fantastic",
    "wonderful", "excellent", "good", "happy", "excited",
]
NEGATIVE_WORDS = [
    "hate", "terrible", "awful", "horrible", "bad",
    "sad", "angry", "frustrated", "disappointed", "upset",
]

_EMOJI_RE = re.compile(
    "[\U0001F600-\U0001F64F\U0001F300-\U0001F5FF\U0001F680-\U0001F6FF"
    "\U0001F1E0-\U0001F1FF\u2600-\u26FF\u2700-\u27BF]"
)


class TemplateReplyProvider(ReplyProvider):
    """Context-aware canned replies.

    With ``sentiment=True`` the reply follows a keyword sentiment score and
    falls back to the feature rules only when the score is unusable.
    """

    name = "template"
    model = "rules"

    def __init__(self, sentiment: bool = False, rng: random.Random | None = None):
        self.sentiment = sentiment
        self._rng = rng or random.Random()

    def generate(self, text: str) -> str:
        if not text or not text.strip():
            raise GenerationError("empty post text")
        if self.sentiment:
            mood = analyze_sentiment(text)
            if mood == "positive":
                return "Love the positive vibes! 🌟 Your optimism is contagious."
            if mood == "negative":
                return "I hear you, and your feelings are valid. 💙 Sometimes we all need to vent."
        return self._feature_reply(text)

    def _feature_reply(self, text: str) -> str:
        if "?" in text:
            return "That's a great question! I'd love to hear more about your thoughts on this. 🤔"
        if "!" in text:
            return "Love the energy! 🔥 This is exactly the kind of content we need more of."
        if len(text.split(" ")) > 50:
            return "Thanks for taking the time to share such a detailed perspective! 🙏"
        if _EMOJI_RE.search(text):
            return "Love the vibes! ✨ Your energy is contagious."
        if contains_keywords(text, TECH_KEYWORDS):
            return "Fascinating tech insight! 💻 Always love learning from the community."
        if contains_keywords(text, BUSINESS_KEYWORDS):
            return "Great business perspective! 🚀 The hustle is real."
        return self._rng.choice(CANNED_REPLIES)


def contains_keywords(text: str, keywords: list[str]) -> bool:
    lowered = text.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def analyze_sentiment(text: str) -> str:
    """Return "positive", "negative" or "neutral" by counting keyword hits."""
    lowered = text.lower()
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)
    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"
