# src/ai_code_reviewer/main.py
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, model_validator
from unidiff import UnidiffParseError

from ai_code_reviewer.config import Settings, load_repo_config
from ai_code_reviewer.errors import (
    AuthenticationError,
    ConfigurationError,
    ProviderError,
    RateLimitError,
)
from ai_code_reviewer.models.config import ProviderConfig
from ai_code_reviewer.models.review import ProviderDescriptor, ReviewComment
from ai_code_reviewer.providers.registry import ProviderRegistry, default_registry
from ai_code_reviewer.review.diagnostics import DiagnosticsCollection
from ai_code_reviewer.review.diff import split_diff, whole_file_diff
from ai_code_reviewer.review.engine import ReviewEngine


logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    app.state.registry = default_registry(
        timeout=settings.request_timeout,
        response_language=settings.response_language,
        extra_instructions=settings.custom_prompt,
    )
    app.state.diagnostics = DiagnosticsCollection()
    app.state.batch_cancel = asyncio.Event()
    logger.info(f"AI Code Reviewer starting with providers: {app.state.registry.list_provider_ids()}")
    yield
    logger.info("AI Code Reviewer shutting down...")


app = FastAPI(title="AI Code Reviewer", lifespan=lifespan)


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_diagnostics(request: Request) -> DiagnosticsCollection:
    return request.app.state.diagnostics


def get_batch_cancel(request: Request) -> asyncio.Event:
    return request.app.state.batch_cancel


class ReviewFileRequest(BaseModel):
    file_path: str
    diff: str | None = None
    content: str | None = None
    language_id: str | None = None
    repo_root: str | None = None
    on_save: bool = False

    @model_validator(mode="after")
    def check_params(self):
        if self.diff is None and self.content is None:
            raise ValueError("Either diff or content required")
        return self


class ReviewFileResponse(BaseModel):
    status: str
    file_path: str
    provider: str
    model: str
    comments: list[ReviewComment] = []


class ReviewBatchRequest(BaseModel):
    diff: str
    repo_root: str | None = None


class BatchFileResult(BaseModel):
    file_path: str
    comments: list[ReviewComment] = []


class BatchFileError(BaseModel):
    file_path: str
    error: str


class ReviewBatchResponse(BaseModel):
    status: str
    provider: str
    model: str
    results: list[BatchFileResult] = []
    skipped: list[str] = []
    errors: list[BatchFileError] = []
    processed_count: int = 0
    error_count: int = 0


class ModelsResponse(BaseModel):
    provider: str
    models: list[str]


def provider_error_to_http(error: Exception) -> HTTPException:
    """Map reviewer errors onto HTTP status codes for the host."""
    if isinstance(error, ConfigurationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, AuthenticationError):
        return HTTPException(status_code=401, detail=str(error))
    if isinstance(error, RateLimitError):
        headers = {"Retry-After": str(error.retry_after)} if error.retry_after else None
        return HTTPException(status_code=429, detail=str(error), headers=headers)
    return HTTPException(status_code=502, detail=str(error))


def build_engine(
    registry: ProviderRegistry,
    diagnostics: DiagnosticsCollection,
    settings: Settings,
    repo_root: str | None,
) -> tuple[ReviewEngine, ProviderConfig]:
    """Validate settings and build an engine for the configured provider.

    Raises ConfigurationError when the settings cannot run a review.
    """
    config = settings.validate_for_review(registry)
    engine = ReviewEngine(
        provider=registry.create(config),
        config=config,
        settings=settings,
        diagnostics=diagnostics,
        repo_config=load_repo_config(repo_root) if repo_root else None,
    )
    return engine, config


@app.get("/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}


@app.get("/api/providers", response_model=list[ProviderDescriptor])
async def list_providers(registry: ProviderRegistry = Depends(get_registry)):
    return registry.descriptors()


@app.get("/api/models", response_model=ModelsResponse)
async def list_models(
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
):
    try:
        config = settings.validate_for_models(registry)
        provider = registry.create(config)
        models = await provider.list_models(config.api_key)
    except (ConfigurationError, ProviderError) as e:
        logger.error(f"Model listing failed: {e}")
        raise provider_error_to_http(e) from e

    return ModelsResponse(provider=config.provider_id, models=models)


@app.post("/api/review", response_model=ReviewFileResponse)
async def review_file(
    request: ReviewFileRequest,
    registry: ProviderRegistry = Depends(get_registry),
    diagnostics: DiagnosticsCollection = Depends(get_diagnostics),
    settings: Settings = Depends(get_settings),
):
    """Review one file: its diff, or the whole content when no diff is given."""
    diff_text = request.diff or ""
    if not diff_text.strip() and request.content:
        diff_text = whole_file_diff(request.file_path, request.content)

    try:
        engine, config = build_engine(registry, diagnostics, settings, request.repo_root)

        if request.on_save:
            wanted = engine.should_review_on_save(request.file_path, request.language_id)
        else:
            wanted = engine.should_review(request.file_path, request.language_id)
        if not wanted:
            logger.info(f"Skipping {request.file_path}: excluded by repository config")
            return ReviewFileResponse(
                status="skipped",
                file_path=request.file_path,
                provider=config.provider_id,
                model=config.model,
            )

        result = await engine.review_file(request.file_path, diff_text, request.language_id)
    except (ConfigurationError, ProviderError) as e:
        logger.error(f"Review failed for {request.file_path}: {e}")
        raise provider_error_to_http(e) from e

    return ReviewFileResponse(
        status="skipped" if result.skipped else "completed",
        file_path=request.file_path,
        provider=config.provider_id,
        model=config.model,
        comments=result.comments,
    )


@app.post("/api/review/batch", response_model=ReviewBatchResponse)
async def review_batch(
    request: ReviewBatchRequest,
    registry: ProviderRegistry = Depends(get_registry),
    diagnostics: DiagnosticsCollection = Depends(get_diagnostics),
    settings: Settings = Depends(get_settings),
    cancel_event: asyncio.Event = Depends(get_batch_cancel),
):
    """Review every changed file of a multi-file unified diff.

    Per-file provider failures are reported in ``errors`` and do not fail the
    request.
    """
    try:
        files = split_diff(request.diff)
    except UnidiffParseError as e:
        logger.error(f"Could not parse batch diff: {e}")
        raise HTTPException(status_code=400, detail=f"Invalid diff: {e}") from e

    try:
        engine, config = build_engine(registry, diagnostics, settings, request.repo_root)
    except ConfigurationError as e:
        logger.error(f"Batch review not started: {e}")
        raise provider_error_to_http(e) from e

    to_review = []
    skipped = []
    for diff_file in files:
        if diff_file.is_deleted or not engine.should_review(diff_file.path):
            skipped.append(diff_file.path)
        else:
            to_review.append((diff_file.path, diff_file.diff))

    logger.info(f"Batch review: {len(to_review)} files to review, {len(skipped)} skipped")
    cancel_event.clear()
    batch = await engine.review_files(to_review, cancel_event=cancel_event)

    skipped.extend(result.path for result in batch.results if result.skipped)
    return ReviewBatchResponse(
        status="cancelled" if batch.cancelled else "completed",
        provider=config.provider_id,
        model=config.model,
        results=[
            BatchFileResult(file_path=result.path, comments=result.comments)
            for result in batch.results
            if not result.skipped
        ],
        skipped=skipped,
        errors=[
            BatchFileError(file_path=failure.path, error=str(failure.error))
            for failure in batch.errors
        ],
        processed_count=batch.processed_count,
        error_count=batch.error_count,
    )


@app.post("/api/review/batch/cancel")
async def cancel_batch(cancel_event: asyncio.Event = Depends(get_batch_cancel)):
    """Stop a running batch before its next group starts."""
    cancel_event.set()
    return {"status": "cancelling"}


@app.get("/api/statistics")
async def statistics(diagnostics: DiagnosticsCollection = Depends(get_diagnostics)):
    return asdict(diagnostics.statistics())


@app.delete("/api/reviews")
async def clear_reviews(diagnostics: DiagnosticsCollection = Depends(get_diagnostics)):
    diagnostics.clear_all()
    return {"status": "cleared"}
