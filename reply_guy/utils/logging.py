"""
Logging setup for reply-guy.

Two loggers are configured:
- ``reply_guy``: pipeline events, shown on a Rich console and optionally
  written to a run log file
- ``reply_guy.llm``: reply provider exchanges, written to their own JSONL file

Events are ordinary log calls; the keyword fields passed to log_event become
top-level keys of each JSONL record.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
import re
from typing import Any

from rich.logging import RichHandler

from ..config import LoggingConfig

LOGGER_NAME = "reply_guy"
LLM_LOGGER_NAME = "reply_guy.llm"

REDACTION_MODES = ("none", "redact_links", "redact_content")

_URL_RE = re.compile(r"https?://\S+")
_HANDLE_RE = re.compile(r"(?<![\w.])@\w{1,15}")

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def setup_logging(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger:
    """Configure the pipeline logger from ``cfg`` and return it.

    The file handler is only attached when ``cfg.file`` is set and a
    directory is given.
    """
    level = _level_from_string(cfg.level)
    logger = _fresh_logger(LOGGER_NAME, level)

    if cfg.console:
        console_handler = RichHandler(rich_tracebacks=True, show_time=False, markup=False)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        _attach(logger, console_handler, level)

    if cfg.file and log_dir is not None:
        _attach(logger, _file_handler(log_dir / cfg.filename), level, _build_file_formatter(cfg.format))

    return logger


def setup_llm_logger(cfg: LoggingConfig, log_dir: Path | None) -> logging.Logger | None:
    """Configure the provider exchange log, or return None when it is disabled.

    Raises:
        ValueError: If ``cfg.llm_log_redaction`` is not a known mode
    """
    if not cfg.llm_log_enabled or log_dir is None:
        return None
    if cfg.llm_log_redaction not in REDACTION_MODES:
        raise ValueError(
            f"Unknown llm_log_redaction {cfg.llm_log_redaction!r}; "
            f"expected one of: {', '.join(REDACTION_MODES)}"
        )

    level = _level_from_string(cfg.level)
    logger = _fresh_logger(LLM_LOGGER_NAME, level)
    _attach(logger, _file_handler(log_dir / cfg.llm_log_file), level, JsonlFormatter())
    return logger


def log_event(logger: logging.Logger | None, message: str, level: int = logging.INFO, **fields: Any) -> None:
    if logger is None:
        return
    logger.log(level, message, extra=fields)


def redact_text(text: str, mode: str) -> str:
    """Apply an ``llm_log_redaction`` mode to post text, a prompt or a reply.

    ``redact_links`` masks URLs and @handles so logged posts cannot be traced
    back to their authors; ``redact_content`` keeps only the length.
    """
    if mode == "redact_content":
        return f"[REDACTED {len(text)} chars]"
    if mode == "redact_links":
        return _HANDLE_RE.sub("@[REDACTED]", _URL_RE.sub("[REDACTED_URL]", text))
    return text


def truncate_text(text: str, max_chars: int = 4000) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "...(truncated)"


class JsonlFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, then event fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _fresh_logger(name: str, level: int) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False
    return logger


def _file_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def _attach(
    logger: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter | None = None,
) -> None:
    handler.setLevel(level)
    if formatter is not None:
        handler.setFormatter(formatter)
    logger.addHandler(handler)


def _build_file_formatter(fmt: str) -> logging.Formatter:
    if fmt == "jsonl":
        return JsonlFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(message)s")


def _level_from_string(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)
