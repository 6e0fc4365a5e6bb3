# tests/integration/test_gemini_provider.py
import json
import httpx
import pytest
from ai_code_reviewer.errors import AuthenticationError, RateLimitError, UpstreamError
from ai_code_reviewer.models.review import Severity
from ai_code_reviewer.providers.gemini import GeminiProvider


GENERATE_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-flash:generateContent?key=test-key"
)
MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models?key=test-key"


def candidate(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.mark.asyncio
async def test_gemini_provider_builds_request(httpx_mock):
    httpx_mock.add_response(
        method="POST",
        url=GENERATE_URL,
        json=candidate('{"comments": [{"message": "Unused import", "line": 3, "severity": "info"}]}'),
    )

    comments = await GeminiProvider().review("test-key", "gemini-2.5-flash", "+import os", "python")

    assert len(comments) == 1
    assert comments[0].message == "Unused import"
    assert comments[0].line == 2

    body = json.loads(httpx_mock.get_request().content)
    assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 2000}
    prompt = body["contents"][0]["parts"][0]["text"]
    assert "+import os" in prompt
    assert "expert code reviewer" in prompt


@pytest.mark.asyncio
async def test_gemini_no_comment(httpx_mock):
    httpx_mock.add_response(method="POST", url=GENERATE_URL, json=candidate("`NO_COMMENT`"))

    assert await GeminiProvider().review("test-key", "gemini-2.5-flash", "+x", "python") == []


@pytest.mark.asyncio
async def test_gemini_missing_candidate_text_means_no_findings(httpx_mock):
    httpx_mock.add_response(method="POST", url=GENERATE_URL, json={"candidates": []})

    assert await GeminiProvider().review("test-key", "gemini-2.5-flash", "+x", "python") == []


@pytest.mark.asyncio
async def test_gemini_repairs_unescaped_quotes(httpx_mock):
    text = '```json\n{"comments": [{"message": "Use "const" here", "line": 2, "severity": "warning"}]}\n```'
    httpx_mock.add_response(method="POST", url=GENERATE_URL, json=candidate(text))

    comments = await GeminiProvider().review("test-key", "gemini-2.5-flash", "+var x = 1;", "javascript")

    assert comments[0].message == 'Use "const" here'
    assert comments[0].severity == Severity.WARNING


@pytest.mark.asyncio
async def test_gemini_non_object_body_is_upstream_error(httpx_mock):
    httpx_mock.add_response(method="POST", url=GENERATE_URL, json=["unexpected"])

    with pytest.raises(UpstreamError):
        await GeminiProvider().review("test-key", "gemini-2.5-flash", "+x", "python")


@pytest.mark.asyncio
@pytest.mark.parametrize("status,error", [
    (400, UpstreamError),
    (401, AuthenticationError),
    (403, AuthenticationError),
    (429, RateLimitError),
    (503, UpstreamError),
])
async def test_gemini_http_errors(httpx_mock, status, error):
    httpx_mock.add_response(method="POST", url=GENERATE_URL, status_code=status, json={"error": {}})

    with pytest.raises(error) as exc_info:
        await GeminiProvider().review("test-key", "gemini-2.5-flash", "+x", "python")

    assert exc_info.value.provider == "gemini"


@pytest.mark.asyncio
async def test_gemini_timeout_is_upstream_error(httpx_mock):
    httpx_mock.add_exception(httpx.ReadTimeout("timed out"))

    with pytest.raises(UpstreamError):
        await GeminiProvider(timeout=1).review("test-key", "gemini-2.5-flash", "+x", "python")


@pytest.mark.asyncio
async def test_gemini_lists_only_gemini_models(httpx_mock):
    httpx_mock.add_response(
        method="GET",
        url=MODELS_URL,
        json={"models": [
            {"name": "models/gemini-2.5-flash"},
            {"name": "models/embedding-001"},
            {"name": "models/gemini-2.5-pro"},
            {"name": "models/gemini-2.5-flash"},
        ]},
    )

    assert await GeminiProvider().list_models("test-key") == ["gemini-2.5-flash", "gemini-2.5-pro"]


@pytest.mark.asyncio
async def test_gemini_list_models_auth_failure(httpx_mock):
    httpx_mock.add_response(method="GET", url=MODELS_URL, status_code=403, json={"error": {}})

    with pytest.raises(AuthenticationError):
        await GeminiProvider().list_models("test-key")
