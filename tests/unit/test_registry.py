import pytest
from ai_code_reviewer.errors import ConfigurationError
from ai_code_reviewer.models.config import ProviderConfig
from ai_code_reviewer.providers.base import LLMProvider
from ai_code_reviewer.providers.custom import CustomProvider
from ai_code_reviewer.providers.gemini import GeminiProvider
from ai_code_reviewer.providers.openai_compat import OpenAIProvider
from ai_code_reviewer.providers.openrouter import OpenRouterProvider
from ai_code_reviewer.providers.registry import ProviderRegistry, default_registry


class EchoProvider(LLMProvider):
    provider_id = "echo"
    name = "Echo"

    async def list_models(self, api_key):
        return ["echo-1"]

    async def review(self, api_key, model, diff_text, language_id):
        return []


@pytest.mark.unit
def test_default_registry_ids():
    assert default_registry().list_provider_ids() == ["openai", "openrouter", "gemini", "custom"]


@pytest.mark.unit
def test_provider_ids_always_include_custom_without_duplicates():
    registry = ProviderRegistry()
    assert registry.list_provider_ids() == ["custom"]

    registry.register("echo", lambda config: EchoProvider())
    registry.register("echo", lambda config: EchoProvider())

    ids = registry.list_provider_ids()
    assert ids == ["echo", "custom"]
    assert len(ids) == len(set(ids))


@pytest.mark.unit
@pytest.mark.parametrize("provider_id,cls", [
    ("openai", OpenAIProvider),
    ("openrouter", OpenRouterProvider),
    ("gemini", GeminiProvider),
])
def test_create_builtin_providers(provider_id, cls):
    provider = default_registry().create(ProviderConfig(provider_id=provider_id))

    assert isinstance(provider, cls)
    assert provider.identify() == provider_id


@pytest.mark.unit
def test_custom_requires_endpoint():
    registry = default_registry()

    with pytest.raises(ConfigurationError):
        registry.create(ProviderConfig(provider_id="custom"))
    with pytest.raises(ConfigurationError):
        registry.create(ProviderConfig(provider_id="custom", custom_endpoint=""))


@pytest.mark.unit
def test_custom_with_endpoint():
    provider = default_registry().create(ProviderConfig(
        provider_id="custom",
        custom_endpoint="http://localhost:8080/v1/chat",
        custom_headers={"X-Team": "core"},
    ))

    assert isinstance(provider, CustomProvider)
    assert provider.identify() == "custom"
    assert provider.endpoint == "http://localhost:8080/v1/chat"
    assert provider.headers == {"X-Team": "core"}


@pytest.mark.unit
def test_unknown_provider_fails():
    with pytest.raises(ConfigurationError, match="Unsupported provider"):
        default_registry().create(ProviderConfig(provider_id="anthropic"))


@pytest.mark.unit
def test_register_extends_without_touching_builtins():
    registry = default_registry()
    registry.register("echo", lambda config: EchoProvider())

    assert isinstance(registry.create(ProviderConfig(provider_id="echo")), EchoProvider)
    assert isinstance(registry.create(ProviderConfig(provider_id="gemini")), GeminiProvider)
    assert registry.list_provider_ids() == ["openai", "openrouter", "gemini", "echo", "custom"]


@pytest.mark.unit
def test_custom_id_is_reserved():
    with pytest.raises(ConfigurationError):
        ProviderRegistry().register("custom", lambda config: EchoProvider())


@pytest.mark.unit
def test_is_supported():
    registry = default_registry()
    assert registry.is_supported("gemini")
    assert registry.is_supported("custom")
    assert not registry.is_supported("mistral")


@pytest.mark.unit
def test_descriptors():
    descriptors = default_registry().descriptors()

    assert [d.provider_id for d in descriptors] == ["openai", "openrouter", "gemini", "custom"]
    assert all(d.display_name == d.provider_id for d in descriptors)
    assert [d.supports_custom_endpoint for d in descriptors] == [False, False, False, True]


@pytest.mark.unit
def test_registry_options_reach_providers():
    registry = default_registry(timeout=5.0, response_language="German", extra_instructions="Be brief.")
    provider = registry.create(ProviderConfig(provider_id="gemini"))

    assert provider.timeout == 5.0
    assert provider.response_language == "German"
    assert provider.extra_instructions == "Be brief."
