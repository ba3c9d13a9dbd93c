"""Tests for reply providers and the provider factory."""

from __future__ import annotations

import json
import random

import httpx
import pytest

from reply_guy.config import LoggingConfig, ProviderConfig
from reply_guy.core.errors import GenerationError
from reply_guy.llm.providers.factory import available_providers, create_provider
from reply_guy.llm.providers.gemini import GeminiProvider, _extract_text
from reply_guy.llm.providers.openai_compatible import OpenAICompatibleProvider
from reply_guy.llm.providers.template import (
    CANNED_REPLIES,
    TemplateReplyProvider,
    analyze_sentiment,
)


def _openai(handler, **cfg_overrides) -> OpenAICompatibleProvider:
    cfg = ProviderConfig(name="openai", api_key="test-key", **cfg_overrides)
    return OpenAICompatibleProvider(
        cfg, "test-key", LoggingConfig(), llm_logger=None, transport=httpx.MockTransport(handler)
    )


def test_available_providers_contains_expected_backends():
    names = available_providers()
    assert {"openai", "openai_compatible", "gemini", "template"} <= set(names)


def test_create_provider_by_name(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    assert isinstance(
        create_provider(ProviderConfig(name="openai", api_key="k"), LoggingConfig(), None),
        OpenAICompatibleProvider,
    )
    assert isinstance(
        create_provider(ProviderConfig(name="Gemini ", api_key="k"), LoggingConfig(), None),
        GeminiProvider,
    )
    template = create_provider(ProviderConfig(name="template_sentiment"), LoggingConfig(), None)
    assert isinstance(template, TemplateReplyProvider)
    assert template.sentiment


def test_create_provider_reads_key_from_env(monkeypatch):
    monkeypatch.setenv("MY_KEY", "from-env")
    provider = create_provider(ProviderConfig(name="openai", api_key_env="MY_KEY"), LoggingConfig(), None)
    assert provider.api_key == "from-env"


def test_create_provider_rejects_unknown_backend_and_missing_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ValueError, match="Unsupported provider"):
        create_provider(ProviderConfig(name="nope"), LoggingConfig(), None)
    with pytest.raises(ValueError, match="Missing API key"):
        create_provider(ProviderConfig(name="openai"), LoggingConfig(), None)


def test_openai_generate_sends_prompt_and_returns_reply():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["url"] = str(request.url)
        captured["auth"] = request.headers["authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "  nice one!  "}}]})

    reply = _openai(handler).generate("Hello world this is a test")

    assert reply == "nice one!"
    assert captured["url"] == "https://api.openai.com/v1/chat/completions"
    assert captured["auth"] == "Bearer test-key"
    body = captured["body"]
    assert body["model"] == "gpt-3.5-turbo"
    assert body["max_tokens"] == 60
    assert body["messages"][0]["content"] == "Write a casual reply to this tweet: Hello world this is a test"


def test_openai_prompt_truncated_to_max_chars():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    _openai(handler, max_chars=5).generate("abcdefghij")

    assert captured["body"]["messages"][0]["content"].endswith(": abcde")


def test_openai_http_error_raises_generation_error():
    def handler(request):
        return httpx.Response(429, json={"error": {"message": "quota"}})

    with pytest.raises(GenerationError, match="HTTP 429"):
        _openai(handler).generate("some post text")


def test_openai_timeout_raises_generation_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(GenerationError, match="timed out"):
        _openai(handler).generate("some post text")


def test_openai_malformed_response_raises_generation_error():
    def handler(request):
        return httpx.Response(200, json={"choices": []})

    with pytest.raises(GenerationError, match="malformed"):
        _openai(handler).generate("some post text")

    def not_json(request):
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(GenerationError, match="malformed"):
        _openai(not_json).generate("some post text")


def test_gemini_generate_uses_generate_content():
    captured = {}

    def handler(request):
        captured["url"] = request.url
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "Gemini says hi"}]}}]}
        )

    provider = GeminiProvider(
        ProviderConfig(name="gemini", model="gemini-test", base_url="https://gl.example"),
        "k",
        LoggingConfig(),
        llm_logger=None,
        transport=httpx.MockTransport(handler),
    )

    assert provider.generate("post text here") == "Gemini says hi"
    assert captured["url"].path == "/v1beta/models/gemini-test:generateContent"
    assert captured["url"].params["key"] == "k"


def test_gemini_extract_text_joins_non_thought_parts():
    data = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"thought": True, "text": "internal reasoning"},
                        {"text": "Great "},
                        {"text": "point!"},
                    ]
                }
            }
        ]
    }

    assert _extract_text(data) == "Great point!"
    assert _extract_text({"candidates": []}) == ""


def _gemini(handler):
    return GeminiProvider(
        ProviderConfig(name="gemini", model="gemini-test", base_url="https://gl.example"),
        "k",
        LoggingConfig(),
        llm_logger=None,
        transport=httpx.MockTransport(handler),
    )


def test_gemini_extract_text_ignores_malformed_parts():
    assert _extract_text({"candidates": [{"content": {"parts": None}}]}) == ""
    assert _extract_text({"candidates": [{"content": {"parts": "text"}}]}) == ""
    assert _extract_text({"candidates": [{"content": {"parts": [{"text": None}, "x", {"text": "ok"}]}}]}) == "ok"
    assert _extract_text(["not", "a", "dict"]) == ""


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": [{"content": {"parts": None}}]},
        {"candidates": [{"content": {"parts": [{"text": None}]}}]},
        {"candidates": None},
    ],
)
def test_gemini_malformed_response_raises_generation_error(body):
    provider = _gemini(lambda request: httpx.Response(200, json=body))

    with pytest.raises(GenerationError, match="malformed"):
        provider.generate("some post text")


def test_template_feature_rules():
    provider = TemplateReplyProvider(rng=random.Random(0))

    assert provider.generate("Is this real?").startswith("That's a great question!")
    assert provider.generate("We shipped it!").startswith("Love the energy!")
    assert provider.generate(" ".join(["word"] * 60)).startswith("Thanks for taking the time")
    assert provider.generate("sunny day ☀").startswith("Love the vibes!")
    assert provider.generate("Thoughts on Programming languages").startswith("Fascinating tech insight!")
    assert provider.generate("My startup journey so far").startswith("Great business perspective!")
    assert provider.generate("Just a quiet afternoon") in CANNED_REPLIES


def test_template_sentiment_mode():
    provider = TemplateReplyProvider(sentiment=True)

    assert analyze_sentiment("I love this, it is great") == "positive"
    assert analyze_sentiment("terrible and sad") == "negative"
    assert provider.generate("I love this, it is great").startswith("Love the positive vibes!")
    assert provider.generate("terrible and sad").startswith("I hear you")
    assert provider.generate("Is it neutral?").startswith("That's a great question!")


def test_template_rejects_empty_text():
    with pytest.raises(GenerationError):
        TemplateReplyProvider().generate("   ")
