"""Reply generation backends."""

from .providers.base import ReplyProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider
from .providers.template import TemplateReplyProvider

__all__ = [
    "ReplyProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "TemplateReplyProvider",
    "create_provider",
    "available_providers",
]
