import logging
from pathlib import Path

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_code_reviewer.errors import ConfigurationError
from ai_code_reviewer.models.config import ProviderConfig, RepoConfig
from ai_code_reviewer.providers.registry import CUSTOM_PROVIDER_ID, ProviderRegistry


logger = logging.getLogger(__name__)

REPO_CONFIG_FILE = ".ai-review.yaml"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Provider selection
    provider: str = "openrouter"
    model: str = ""

    # Credentials, one per provider id
    openai_api_key: str | None = None
    openrouter_api_key: str | None = None
    gemini_api_key: str | None = None
    custom_api_key: str | None = None
    # Keys for providers registered at startup, e.g. API_KEYS='{"mistral": "..."}'
    api_keys: dict[str, str] = {}

    # Custom endpoint
    custom_endpoint: str | None = None
    custom_headers: dict[str, str] = {}
    custom_prompt: str = ""

    # Review behaviour
    response_language: str = "English"
    parallel_review_count: int = 3
    batch_delay: float = 0.1
    request_timeout: float = 60.0
    log_level: str = "INFO"

    @field_validator("parallel_review_count")
    @classmethod
    def clamp_parallel_review_count(cls, value: int) -> int:
        return max(1, min(10, value))

    def api_key_for(self, provider_id: str) -> str:
        return getattr(self, f"{provider_id}_api_key", None) or self.api_keys.get(provider_id, "")

    def provider_config(self) -> ProviderConfig:
        return ProviderConfig(
            provider_id=self.provider,
            model=self.model,
            api_key=self.api_key_for(self.provider),
            custom_endpoint=self.custom_endpoint,
            custom_headers=self.custom_headers,
        )

    def validate_for_models(self, registry: ProviderRegistry) -> ProviderConfig:
        """Check what listing models needs: provider, key and, for custom, an endpoint."""
        config = self.provider_config()
        if not config.provider_id:
            raise ConfigurationError("No provider selected.")
        if not registry.is_supported(config.provider_id):
            raise ConfigurationError(f"Unsupported provider: {config.provider_id}")
        if not config.api_key:
            raise ConfigurationError("API key is missing.")
        if config.provider_id == CUSTOM_PROVIDER_ID and not config.custom_endpoint:
            raise ConfigurationError("Endpoint is required for custom provider.")
        return config

    def validate_for_review(self, registry: ProviderRegistry) -> ProviderConfig:
        config = self.validate_for_models(registry)
        if not config.model:
            raise ConfigurationError("No model selected.")
        return config


def load_repo_config(root: str | Path) -> RepoConfig:
    """Load .ai-review.yaml from a repository root or use defaults."""
    path = Path(root) / REPO_CONFIG_FILE
    if not path.is_file():
        return RepoConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return RepoConfig(**data)
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        logger.warning(f"Invalid {REPO_CONFIG_FILE}: {e}")
        return RepoConfig()
