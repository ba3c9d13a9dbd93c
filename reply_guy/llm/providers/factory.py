"""Provider factory and registry for hot-swappable reply backends."""

from __future__ import annotations

from ...config import LoggingConfig, ProviderConfig, get_api_key
from .base import ReplyProvider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider
from .template import TemplateReplyProvider


_API_PROVIDERS: dict[str, type[ReplyProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
}

_OFFLINE_PROVIDERS = {
    "template": lambda: TemplateReplyProvider(),
    "template_sentiment": lambda: TemplateReplyProvider(sentiment=True),
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted([*_API_PROVIDERS, *_OFFLINE_PROVIDERS])


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig,
    llm_logger,
) -> ReplyProvider:
    """Build a provider instance from runtime config.

    Raises:
        ValueError: If the provider name is unknown or an API key is missing
    """
    name = provider_cfg.name.lower().strip()
    if name in _OFFLINE_PROVIDERS:
        return _OFFLINE_PROVIDERS[name]()
    builder = _API_PROVIDERS.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ValueError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    api_key = get_api_key(provider_cfg)
    return builder(provider_cfg, api_key, log_cfg, llm_logger)
