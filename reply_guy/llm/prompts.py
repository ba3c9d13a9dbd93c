"""Prompt templates for reply generation."""

from __future__ import annotations

REPLY_PROMPT = "Write a casual reply to this tweet: {text}"


def reply_prompt(text: str, max_chars: int) -> str:
    return REPLY_PROMPT.format(text=text[:max_chars])
