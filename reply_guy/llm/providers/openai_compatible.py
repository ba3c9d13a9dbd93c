"""OpenAI-compatible chat completions provider for reply generation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import GenerationError
from ..prompts import reply_prompt
from .base import ReplyProvider


class OpenAICompatibleProvider(ReplyProvider):
    """Provider for any endpoint speaking the ``/chat/completions`` protocol."""

    name = "openai"

    def __init__(
        self,
        cfg: ProviderConfig,
        api_key: str | None,
        log_cfg: LoggingConfig,
        llm_logger: logging.Logger | None,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError(f"Missing API key (set {cfg.api_key_env} or provider.api_key)")
        self.cfg = cfg
        self.model = cfg.model
        self.api_key = api_key
        self.log_cfg = log_cfg
        self.llm_logger = llm_logger
        self._transport = transport

    def generate(self, text: str) -> str:
        prompt = reply_prompt(text, self.cfg.max_chars)
        payload = {
            "model": self.cfg.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.cfg.max_tokens,
            "temperature": self.cfg.temperature,
        }
        try:
            data = self._post(payload)
        except httpx.HTTPError as exc:
            self._log_llm_response("provider_error", str(exc), prompt)
            raise GenerationError(_describe_http_error(exc)) from exc
        except ValueError as exc:
            self._log_llm_response("parse_error", str(exc), prompt)
            raise GenerationError(f"malformed response: {exc}") from exc

        content = _extract_text(data)
        if not content:
            self._log_llm_response("parse_error", str(data)[:500], prompt)
            raise GenerationError("malformed response: no completion text")
        self._log_llm_response("ok", content, prompt)
        return content

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self.cfg.base_url.rstrip('/')}/chat/completions"
        headers = {"Authorization": f"Bearer {self.api_key}"}
        with httpx.Client(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            transport=self._transport,
        ) as client:
            resp = client.post(url, headers=headers, json=payload)
            resp.raise_for_status()
            return resp.json()


def _extract_text(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""


def _describe_http_error(exc: httpx.HTTPError) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        return f"HTTP {exc.response.status_code} from provider"
    if isinstance(exc, httpx.TimeoutException):
        return "provider request timed out"
    return f"{type(exc).__name__}: {exc}"
