# src/ai_code_reviewer/providers/custom.py
import logging
from typing import Any

import httpx

from ai_code_reviewer.errors import AuthenticationError, ConfigurationError, UpstreamError
from ai_code_reviewer.models.review import ReviewComment
from ai_code_reviewer.review.normalizer import normalize_response
from ai_code_reviewer.review.prompts import build_review_prompt
from .base import DEFAULT_TIMEOUT, LLMProvider, dedupe, map_http_error
from .openai_compat import build_chat_body


logger = logging.getLogger(__name__)

DEFAULT_MODELS = ["gpt-3.5-turbo", "gpt-4", "claude-3-sonnet"]


def extract_response_text(data: Any) -> str | None:
    """Pull the model text out of an OpenAI-like or ad hoc response body.

    Tries choices[0].message.content, choices[0].text, content, response and
    returns the first non-empty one. An empty value is returned only when no
    later field has text; KeyError when none of them is present.
    """
    found = []
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            choice = choices[0]
            message = choice.get("message")
            if isinstance(message, dict) and "content" in message:
                found.append(message["content"])
            if "text" in choice:
                found.append(choice["text"])
        for key in ("content", "response"):
            if key in data:
                found.append(data[key])

    if not found:
        raise KeyError("no response text field")
    for value in found:
        if value:
            return value
    return found[0]


def extract_model_ids(data: Any) -> list[str] | None:
    """Model ids from {models: [...]}, {data: [...]} or a bare list; None if unrecognised."""
    models = data
    if isinstance(data, dict):
        models = data.get("models") or data.get("data")
    if not isinstance(models, list):
        return None

    ids = []
    for model in models:
        if isinstance(model, str):
            ids.append(model)
        elif isinstance(model, dict):
            ids.append(model.get("id") or model.get("name") or "unknown")
    return dedupe(ids)


class CustomProvider(LLMProvider):
    """User-configured endpoint that accepts an OpenAI-style chat body."""

    provider_id = "custom"
    name = "Custom provider"
    supports_custom_endpoint = True

    def __init__(
        self,
        endpoint: str,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        response_language: str = "English",
        extra_instructions: str = "",
    ):
        if not endpoint:
            raise ConfigurationError("Endpoint is required for custom provider.")
        super().__init__(timeout=timeout)
        self.endpoint = endpoint
        self.headers = dict(headers or {})
        self.response_language = response_language
        self.extra_instructions = extra_instructions

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            **self.headers,
        }

    async def list_models(self, api_key: str) -> list[str]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.endpoint.rstrip('/')}/models",
                    headers=self._headers(api_key),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            error = map_http_error(e, self, "fetching models")
            if isinstance(error, AuthenticationError):
                logger.error(f"Custom provider models fetch error: {e}")
                raise error from e
            logger.warning(f"Custom provider models fetch failed, using defaults: {e}")
            return list(DEFAULT_MODELS)

        models = extract_model_ids(data)
        if not models:
            logger.warning("Custom provider returned no recognisable model list, using defaults")
            return list(DEFAULT_MODELS)
        return models

    async def review(
        self,
        api_key: str,
        model: str,
        diff_text: str,
        language_id: str,
    ) -> list[ReviewComment]:
        prompt = build_review_prompt(
            diff_text,
            language_id,
            response_language=self.response_language,
            extra_instructions=self.extra_instructions,
        )

        logger.info(f"Calling custom endpoint {self.endpoint} with model {model}")
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    self.endpoint,
                    headers=self._headers(api_key),
                    json=build_chat_body(model, prompt),
                    timeout=self.timeout,
                )
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Custom provider review error: {e}")
            raise map_http_error(e, self, "performing code review") from e

        try:
            text = extract_response_text(data)
        except KeyError as e:
            logger.error(f"Custom provider returned an unexpected response format: {str(data)[:200]}")
            raise UpstreamError(
                "Custom provider returned an unexpected response format.",
                provider=self.provider_id,
            ) from e

        return normalize_response(text)
