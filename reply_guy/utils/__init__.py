"""Logging helpers shared by the pipeline stages and reply providers."""

from .logging import REDACTION_MODES, log_event, redact_text, setup_llm_logger, setup_logging

__all__ = ["REDACTION_MODES", "log_event", "redact_text", "setup_llm_logger", "setup_logging"]
