"""Google Gemini provider for reply generation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import GenerationError
from ..prompts import reply_prompt
from .base import ReplyProvider
from .openai_compatible import _describe_http_error


class GeminiProvider(ReplyProvider):
    """Gemini-backed provider calling the ``generateContent`` endpoint."""

    name = "gemini"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("Missing Google API key")
        self.cfg = cfg
        self.model = cfg.model
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self._transport = transport

    def generate(self, text: str) -> str:
        prompt = reply_prompt(text, self.cfg.max_chars)
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.cfg.temperature,
                "maxOutputTokens": self.cfg.max_tokens,
            },
        }
        try:
            data = self._post(payload)
        except httpx.HTTPError as exc:
            self._log_llm_response("provider_error", str(exc), prompt)
            raise GenerationError(_describe_http_error(exc)) from exc
        except ValueError as exc:
            self._log_llm_response("parse_error", str(exc), prompt)
            raise GenerationError(f"malformed response: {exc}") from exc

        content = _extract_text(data).strip()
        if not content:
            self._log_llm_response("parse_error", str(data)[:500], prompt)
            raise GenerationError("malformed response: no candidate text")
        self._log_llm_response("ok", content, prompt)
        return content

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/v1beta/models/{self.cfg.model}:generateContent"
        params = {"key": self.api_key}
        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            resp = client.post(url, params=params, json=payload)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: dict[str, Any]) -> str:
    """Join the text parts of the first candidate, skipping thought parts when possible."""
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    if not isinstance(parts, list):
        return ""
    parts = [p for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    texts = [p["text"] for p in parts if not p.get("thought")]
    if not any(texts):
        texts = [p["text"] for p in parts]
    return "".join(texts)
