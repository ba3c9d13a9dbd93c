"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: Mirror list and HTTP fetching settings
- ExtractConfig: Extraction rules and length thresholds
- PipelineConfig: Inter-item delay and concurrency
- ProviderConfig: Reply provider settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for fetching post pages from mirror hosts.

    Attributes:
        mirrors: Ordered mirror base URLs, tried top-to-bottom
        status_path: Path template appended to a mirror base, ``{id}`` is the post id
        timeout_seconds: Per-request timeout
        retries: Retry attempts per mirror after a transport failure
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string (some mirrors reject non-browsers)
    """

    mirrors: list[str] = field(
        default_factory=lambda: [
            "https://nitter.net",
            "https://nitter.privacydev.net",
            "https://nitter.poast.org",
            "https://xcancel.com",
        ]
    )
    status_path: str = "/i/status/{id}"
    timeout_seconds: float = 10.0
    retries: int = 0
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )


@dataclass
class ExtractConfig:
    """Configuration for locating post text inside mirror markup.

    Rules are applied in this order: ``selectors``, ``meta_tags``,
    ``generic_selectors``, then the line heuristic.

    Attributes:
        selectors: CSS selectors for known post-text locations, most specific first
        meta_tags: ``<meta>`` property/name values whose content holds a description
        generic_selectors: Broad CSS selectors tried after the metadata tags
        min_text_length: Candidate text must be longer than this
        line_min_length: Line heuristic lower bound (exclusive)
        line_max_length: Line heuristic upper bound (exclusive)
    """

    selectors: list[str] = field(
        default_factory=lambda: [
            ".main-tweet .tweet-content",
            ".tweet-content",
            ".tweet-text",
            '[data-testid="tweetText"]',
            ".content",
        ]
    )
    meta_tags: list[str] = field(
        default_factory=lambda: ["og:description", "twitter:description", "description"]
    )
    generic_selectors: list[str] = field(
        default_factory=lambda: ['[class*="tweet"]', '[class*="content"]']
    )
    min_text_length: int = 10
    line_min_length: int = 10
    line_max_length: int = 500


@dataclass
class PipelineConfig:
    """Configuration for the batch coordinator.

    Attributes:
        delay_seconds: Pause between consecutive items
        max_concurrency: Items in flight at once; 1 means strictly sequential
    """

    delay_seconds: float = 1.0
    max_concurrency: int = 1


@dataclass
class ProviderConfig:
    """Configuration for the reply provider.

    Attributes:
        name: Provider name ("openai", "gemini" or "template")
        model: Model identifier
        api_key_env: Environment variable name containing the API key
        base_url: Base URL for the provider API
        api_key: Optional inline API key (overrides env var)
        temperature: Sampling temperature
        max_tokens: Maximum reply length in tokens
        max_chars: Maximum characters of post text sent to the provider
        timeout_seconds: Request timeout for the provider API
        trust_env: Whether to respect system proxy settings for API requests
    """

    name: str = "openai"
    model: str = "gpt-3.5-turbo"
    api_key_env: str = "OPENAI_API_KEY"
    base_url: str = "https://api.openai.com/v1"
    api_key: str | None = None
    temperature: float = 0.7
    max_tokens: int = 60
    max_chars: int = 2000
    timeout_seconds: float = 30.0
    trust_env: bool = True


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
        llm_log_enabled: Whether to enable separate provider interaction logging
        llm_log_detail: "response_only" or "prompt_response"
        llm_log_redaction: Redaction mode ("none", "redact_links", "redact_content")
        llm_log_file: Name of the provider log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"
    llm_log_enabled: bool = False
    llm_log_detail: str = "response_only"
    llm_log_redaction: str = "redact_links"
    llm_log_file: str = "llm.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults.

    A fresh AppConfig is returned on every call so CLI overrides never leak
    into later loads.
    """
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig, ignoring unknown sections."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        extract=ExtractConfig(**data["extract"]),
        pipeline=PipelineConfig(**data["pipeline"]),
        provider=ProviderConfig(**data["provider"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_api_key(cfg: ProviderConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
