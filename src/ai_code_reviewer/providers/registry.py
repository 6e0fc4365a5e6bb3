# src/ai_code_reviewer/providers/registry.py
import logging
from typing import Callable

from ai_code_reviewer.errors import ConfigurationError
from ai_code_reviewer.models.config import ProviderConfig
from ai_code_reviewer.models.review import ProviderDescriptor
from .base import DEFAULT_TIMEOUT, LLMProvider
from .custom import CustomProvider
from .gemini import GeminiProvider
from .openai_compat import OpenAIProvider
from .openrouter import OpenRouterProvider


logger = logging.getLogger(__name__)

CUSTOM_PROVIDER_ID = "custom"

ProviderFactory = Callable[[ProviderConfig], LLMProvider]


class ProviderRegistry:
    """Maps provider ids to factories.

    Populated once at startup and only read afterwards. The ``custom`` id is
    always available and built from the configured endpoint and headers.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        response_language: str = "English",
        extra_instructions: str = "",
    ):
        self.timeout = timeout
        self.response_language = response_language
        self.extra_instructions = extra_instructions
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, provider_id: str, factory: ProviderFactory) -> None:
        if not provider_id:
            raise ConfigurationError("Provider id must not be empty.")
        if provider_id == CUSTOM_PROVIDER_ID:
            raise ConfigurationError(f"'{CUSTOM_PROVIDER_ID}' is reserved for the user-defined endpoint.")
        if provider_id in self._factories:
            logger.info(f"Replacing provider factory for '{provider_id}'")
        self._factories[provider_id] = factory

    def is_supported(self, provider_id: str) -> bool:
        return provider_id in self._factories or provider_id == CUSTOM_PROVIDER_ID

    def list_provider_ids(self) -> list[str]:
        return [*self._factories, CUSTOM_PROVIDER_ID]

    def create(self, config: ProviderConfig) -> LLMProvider:
        if config.provider_id == CUSTOM_PROVIDER_ID:
            if not config.custom_endpoint:
                raise ConfigurationError("Endpoint is required for custom provider.")
            return CustomProvider(
                endpoint=config.custom_endpoint,
                headers=config.custom_headers,
                timeout=self.timeout,
                response_language=self.response_language,
                extra_instructions=self.extra_instructions,
            )

        factory = self._factories.get(config.provider_id)
        if factory is None:
            raise ConfigurationError(f"Unsupported provider: {config.provider_id}")
        return factory(config)

    def descriptors(self) -> list[ProviderDescriptor]:
        return [
            ProviderDescriptor(
                provider_id=provider_id,
                display_name=provider_id,
                supports_custom_endpoint=provider_id == CUSTOM_PROVIDER_ID,
            )
            for provider_id in self.list_provider_ids()
        ]


def default_registry(
    timeout: float = DEFAULT_TIMEOUT,
    response_language: str = "English",
    extra_instructions: str = "",
) -> ProviderRegistry:
    """Registry with the built-in OpenAI, OpenRouter and Gemini providers."""
    registry = ProviderRegistry(
        timeout=timeout,
        response_language=response_language,
        extra_instructions=extra_instructions,
    )
    options = {
        "timeout": timeout,
        "response_language": response_language,
        "extra_instructions": extra_instructions,
    }
    registry.register("openai", lambda config: OpenAIProvider(**options))
    registry.register("openrouter", lambda config: OpenRouterProvider(**options))
    registry.register("gemini", lambda config: GeminiProvider(**options))
    return registry
