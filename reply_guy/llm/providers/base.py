"""
Abstract base class for reply providers.

New providers should inherit from ReplyProvider and implement generate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging

from ...config import LoggingConfig
from ...utils.logging import log_event, redact_text, truncate_text


class ReplyProvider(ABC):
    """Turns post text into a short reply.

    Implementations perform a single attempt per call; any failure is raised
    as GenerationError so the batch coordinator can record it.
    """

    name: str = "base"
    model: str = ""
    log_cfg: LoggingConfig | None = None
    llm_logger: logging.Logger | None = None

    @abstractmethod
    def generate(self, text: str) -> str:
        """Generate a reply for one post.

        Args:
            text: The extracted post text

        Returns:
            The reply text, stripped

        Raises:
            GenerationError: On quota, network, or malformed-response failures
        """
        raise NotImplementedError

    def _log_llm_response(self, status: str, content: str, prompt: str) -> None:
        if self.llm_logger is None or self.log_cfg is None:
            return
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": "llm_reply_response",
            "status": status,
            "provider": self.name,
            "model": self.model,
            "response_chars": len(content),
            "raw_response": truncate_text(redact_text(content, redaction)),
        }
        if self.log_cfg.llm_log_detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(prompt, redaction))
        log_event(self.llm_logger, "LLM response", **payload)
