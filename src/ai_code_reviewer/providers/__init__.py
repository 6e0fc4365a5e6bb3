from .base import LLMProvider
from .custom import CustomProvider
from .gemini import GeminiProvider
from .openai_compat import OpenAIProvider
from .openrouter import OpenRouterProvider
from .registry import ProviderRegistry, default_registry

__all__ = [
    "LLMProvider",
    "CustomProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ProviderRegistry",
    "default_registry",
]
