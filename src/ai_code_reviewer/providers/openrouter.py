from .openai_compat import OpenAICompatibleProvider


class OpenRouterProvider(OpenAICompatibleProvider):
    """OpenRouter exposes every hosted model through the OpenAI chat API."""

    provider_id = "openrouter"
    name = "OpenRouter"
    BASE_URL = "https://openrouter.ai/api/v1"
