# src/ai_code_reviewer/providers/base.py
import logging
from abc import ABC, abstractmethod

import httpx

from ai_code_reviewer.errors import AuthenticationError, ProviderError, RateLimitError, UpstreamError
from ai_code_reviewer.models.review import ProviderDescriptor, ReviewComment


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
TEMPERATURE = 0.1
MAX_TOKENS = 2000


class LLMProvider(ABC):
    """A backend that turns a diff into review comments."""

    provider_id: str = ""
    name: str = ""
    supports_custom_endpoint: bool = False

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        self.timeout = timeout

    def identify(self) -> str:
        return self.provider_id

    def descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            provider_id=self.provider_id,
            display_name=self.provider_id,
            supports_custom_endpoint=self.supports_custom_endpoint,
        )

    @abstractmethod
    async def list_models(self, api_key: str) -> list[str]:
        """Return the model ids available to this credential."""
        pass

    @abstractmethod
    async def review(
        self,
        api_key: str,
        model: str,
        diff_text: str,
        language_id: str,
    ) -> list[ReviewComment]:
        """Send one review request and return the parsed comments."""
        pass


def dedupe(model_ids) -> list[str]:
    """Drop empty and repeated ids, keeping first-seen order."""
    seen = set()
    result = []
    for model_id in model_ids:
        if model_id and model_id not in seen:
            seen.add(model_id)
            result.append(model_id)
    return result


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("retry-after")
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


def map_http_error(exc: Exception, provider: LLMProvider, action: str) -> ProviderError:
    """Translate an httpx failure into the matching provider error."""
    name, provider_id = provider.name, provider.provider_id
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status in (401, 403):
            return AuthenticationError(
                f"{name} rejected the API key while {action} (HTTP {status}). "
                "Check the key and its permissions.",
                provider=provider_id,
                status_code=status,
            )
        if status == 429:
            return RateLimitError(
                f"{name} rate limit exceeded while {action}. Please try again later.",
                provider=provider_id,
                retry_after=_retry_after(exc.response),
            )
        return UpstreamError(
            f"{name} returned HTTP {status} while {action}.",
            provider=provider_id,
            status_code=status,
        )
    if isinstance(exc, httpx.HTTPError):
        return UpstreamError(f"Could not reach {name} while {action}: {exc}", provider=provider_id)
    return UpstreamError(f"Unexpected error from {name} while {action}: {exc}", provider=provider_id)
