# src/ai_code_reviewer/providers/gemini.py
import logging

import httpx

from ai_code_reviewer.errors import UpstreamError
from ai_code_reviewer.models.review import ReviewComment
from ai_code_reviewer.review.normalizer import normalize_response
from ai_code_reviewer.review.prompts import build_review_prompt
from .base import DEFAULT_TIMEOUT, MAX_TOKENS, TEMPERATURE, LLMProvider, dedupe, map_http_error


logger = logging.getLogger(__name__)


def extract_candidate_text(data: dict) -> str | None:
    """Text at candidates[0].content.parts[0].text, or None when any step is missing."""
    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class GeminiProvider(LLMProvider):
    provider_id = "gemini"
    name = "Gemini"
    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        response_language: str = "English",
        extra_instructions: str = "",
    ):
        super().__init__(timeout=timeout)
        self.response_language = response_language
        self.extra_instructions = extra_instructions

    async def list_models(self, api_key: str) -> list[str]:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.BASE_URL}/models",
                    params={"key": api_key},
                    timeout=self.timeout,
                )
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini models fetch error: {e}")
            raise map_http_error(e, self, "fetching models") from e

        if not isinstance(data, dict):
            data = {}
        names = [model.get("name", "") for model in data.get("models") or [] if isinstance(model, dict)]
        return dedupe(
            name.removeprefix("models/") for name in names if "gemini" in name
        )

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
            strengthened=True,
            response_language=self.response_language,
            extra_instructions=self.extra_instructions,
        )

        logger.info(f"Calling Gemini with model {model}, diff length: {len(diff_text)} chars")
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    f"{self.BASE_URL}/models/{model}:generateContent",
                    params={"key": api_key},
                    json={
                        "contents": [{
                            "parts": [{"text": prompt}]
                        }],
                        "generationConfig": {
                            "temperature": TEMPERATURE,
                            "maxOutputTokens": MAX_TOKENS,
                        },
                    },
                    timeout=self.timeout,
                )
                response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Gemini review error: {e}")
            raise map_http_error(e, self, "performing code review") from e

        if not isinstance(data, dict):
            raise UpstreamError("Gemini returned an unexpected response format.", provider=self.provider_id)

        text = extract_candidate_text(data)
        if text is None:
            logger.warning(f"Gemini response has no candidate text: {str(data)[:200]}")
        else:
            logger.info(f"Gemini response length: {len(text)} chars")

        return normalize_response(text)
