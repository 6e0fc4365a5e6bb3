# src/ai_code_reviewer/providers/openai_compat.py
import logging

import openai
from openai import AsyncOpenAI

from ai_code_reviewer.errors import AuthenticationError, ProviderError, RateLimitError, UpstreamError
from ai_code_reviewer.models.review import ReviewComment
from ai_code_reviewer.review.normalizer import normalize_response
from ai_code_reviewer.review.prompts import SYSTEM_MESSAGE, build_review_prompt
from .base import DEFAULT_TIMEOUT, MAX_TOKENS, TEMPERATURE, LLMProvider, dedupe


logger = logging.getLogger(__name__)


def build_chat_messages(model: str, prompt: str) -> tuple[list[dict[str, str]], dict]:
    """Messages and sampling options for a chat completion.

    o1 models reject both the system role and ``temperature``, so the system
    text is folded into the user message and temperature is left out.
    """
    if model.startswith("o1"):
        return [{"role": "user", "content": f"{SYSTEM_MESSAGE}\n\n{prompt}"}], {}

    messages = [
        {"role": "system", "content": SYSTEM_MESSAGE},
        {"role": "user", "content": prompt},
    ]
    return messages, {"temperature": TEMPERATURE}


def build_chat_body(model: str, prompt: str) -> dict:
    messages, options = build_chat_messages(model, prompt)
    return {"model": model, "messages": messages, **options, "max_tokens": MAX_TOKENS}


class OpenAICompatibleProvider(LLMProvider):
    """Provider for backends that speak the OpenAI chat completions API."""

    BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        response_language: str = "English",
        extra_instructions: str = "",
    ):
        super().__init__(timeout=timeout)
        self.response_language = response_language
        self.extra_instructions = extra_instructions

    def _client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.BASE_URL,
            max_retries=0,
            timeout=self.timeout,
        )

    def _filter_models(self, model_ids: list[str]) -> list[str]:
        return model_ids

    async def list_models(self, api_key: str) -> list[str]:
        try:
            async with self._client(api_key) as client:
                page = await client.models.list()
        except openai.OpenAIError as e:
            logger.error(f"{self.name} models fetch error: {e}")
            raise self._map_error(e, "fetching models") from e

        return dedupe(self._filter_models([model.id for model in page.data]))

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
        messages, options = build_chat_messages(model, prompt)

        logger.info(f"Calling {self.name} with model {model}, diff length: {len(diff_text)} chars")
        try:
            async with self._client(api_key) as client:
                response = await client.chat.completions.create(
                    model=model,
                    messages=messages,
                    max_tokens=MAX_TOKENS,
                    **options,
                )
        except openai.OpenAIError as e:
            logger.error(f"{self.name} review error: {e}")
            raise self._map_error(e, "performing code review") from e

        if not response.choices:
            raise UpstreamError(f"{self.name} returned no choices.", provider=self.provider_id)

        text = response.choices[0].message.content
        logger.info(f"{self.name} response length: {len(text or '')} chars")
        return normalize_response(text)

    def _map_error(self, exc: openai.OpenAIError, action: str) -> ProviderError:
        if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return AuthenticationError(
                f"Invalid or unauthorized {self.name} API key. "
                "Please check your API key and ensure it has the necessary permissions.",
                provider=self.provider_id,
                status_code=exc.status_code,
            )
        if isinstance(exc, openai.RateLimitError):
            retry_after = exc.response.headers.get("retry-after")
            return RateLimitError(
                f"{self.name} API rate limit exceeded. Please try again later.",
                provider=self.provider_id,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if isinstance(exc, openai.BadRequestError):
            return UpstreamError(
                f"Invalid request to {self.name} API. Please check your model selection.",
                provider=self.provider_id,
                status_code=exc.status_code,
            )
        if isinstance(exc, openai.APIStatusError):
            return UpstreamError(
                f"{self.name} returned HTTP {exc.status_code} while {action}.",
                provider=self.provider_id,
                status_code=exc.status_code,
            )
        return UpstreamError(
            f"An error occurred while {action} with {self.name}: {exc}",
            provider=self.provider_id,
        )


class OpenAIProvider(OpenAICompatibleProvider):
    provider_id = "openai"
    name = "OpenAI"
    BASE_URL = "https://api.openai.com/v1"

    def _filter_models(self, model_ids: list[str]) -> list[str]:
        # Only chat completion models
        return [
            model_id for model_id in model_ids
            if "gpt" in model_id or "o1" in model_id or "chatgpt" in model_id
        ]
