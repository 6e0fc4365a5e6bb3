# src/ai_code_reviewer/review/engine.py
import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from pathlib import PurePath

from ai_code_reviewer.config import Settings
from ai_code_reviewer.models.config import ProviderConfig, RepoConfig
from ai_code_reviewer.models.review import ReviewComment, ReviewRequest, Severity
from ai_code_reviewer.providers.base import LLMProvider
from .diagnostics import DiagnosticsCollection
from .diff import language_for_path


logger = logging.getLogger(__name__)

SEVERITY_ORDER = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}

ALWAYS_SKIPPED_DIRS = ("node_modules", ".git")


@dataclass
class FileReviewResult:
    """Outcome of reviewing one file."""
    path: str
    comments: list[ReviewComment] = field(default_factory=list)
    skipped: bool = False


@dataclass
class FileReviewError:
    path: str
    error: BaseException


@dataclass
class BatchReviewResult:
    results: list[FileReviewResult] = field(default_factory=list)
    errors: list[FileReviewError] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)


class ReviewEngine:
    def __init__(
        self,
        provider: LLMProvider,
        config: ProviderConfig,
        settings: Settings,
        diagnostics: DiagnosticsCollection,
        repo_config: RepoConfig | None = None,
    ):
        self.provider = provider
        self.config = config
        self.settings = settings
        self.diagnostics = diagnostics
        self.repo_config = repo_config or RepoConfig()

    @property
    def parallel_review_count(self) -> int:
        return self.repo_config.parallel_review_count or self.settings.parallel_review_count

    def should_review(self, path: str, language_id: str | None = None) -> bool:
        """Skip excluded files, vendored directories and unsupported languages."""
        parts = PurePath(path).parts
        if any(skipped in parts for skipped in ALWAYS_SKIPPED_DIRS):
            return False
        if self._is_excluded(path, self.repo_config.exclude):
            return False
        return (language_id or language_for_path(path)) in self.repo_config.languages

    def should_review_on_save(self, path: str, language_id: str | None = None) -> bool:
        return self.repo_config.auto_review_on_save and self.should_review(path, language_id)

    async def review_file(
        self,
        path: str,
        diff_text: str,
        language_id: str | None = None,
    ) -> FileReviewResult:
        """Review one file's diff and publish the comments.

        Raises ProviderError when the backend call fails.
        """
        if not diff_text or not diff_text.strip():
            logger.info(f"No changes to review in {path}")
            return FileReviewResult(path=path, skipped=True)

        language_id = language_id or language_for_path(path)
        logger.info(f"Reviewing {path} ({language_id}) with {self.provider.identify()}/{self.config.model}")

        request = ReviewRequest(
            api_key=self.config.api_key,
            model=self.config.model,
            diff_text=diff_text,
            language_id=language_id,
        )
        comments = await self.provider.review(
            request.api_key,
            request.model,
            request.diff_text,
            request.language_id,
        )
        comments = [
            comment for comment in comments
            if self._passes_severity_threshold(comment.severity, self.repo_config.min_severity)
        ]

        self.diagnostics.set(path, comments)
        logger.info(f"Review completed for {path}: {len(comments)} comments")
        for index, comment in enumerate(comments, 1):
            logger.debug(f"{index}. Line {comment.line + 1}: {comment.message}")

        return FileReviewResult(path=path, comments=comments)

    async def review_files(
        self,
        files: list[tuple[str, str]],
        cancel_event: asyncio.Event | None = None,
    ) -> BatchReviewResult:
        """Review (path, diff) pairs in fixed-size concurrent groups.

        Each group is awaited fully before the next one starts. Cancellation is
        checked between groups only, so requests already in flight finish.
        """
        batch = BatchReviewResult()
        group_size = self.parallel_review_count

        for start in range(0, len(files), group_size):
            if cancel_event is not None and cancel_event.is_set():
                batch.cancelled = True
                logger.info(f"Batch review cancelled after {start} of {len(files)} files")
                break

            group = files[start:start + group_size]
            outcomes = await asyncio.gather(
                *(self.review_file(path, diff_text) for path, diff_text in group),
                return_exceptions=True,
            )

            for (path, _), outcome in zip(group, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Review failed for {path}: {outcome}")
                    batch.errors.append(FileReviewError(path=path, error=outcome))
                else:
                    batch.results.append(outcome)

            logger.info(
                f"{min(start + len(group), len(files))}/{len(files)} files processed "
                f"({batch.error_count} errors)"
            )

            has_more = start + group_size < len(files)
            if has_more and self.settings.batch_delay > 0:
                await asyncio.sleep(self.settings.batch_delay)

        return batch

    def _is_excluded(self, file_path: str, patterns: list[str]) -> bool:
        """Check if file matches any exclude pattern."""
        name = PurePath(file_path).name
        for pattern in patterns:
            if fnmatch.fnmatch(file_path, pattern) or fnmatch.fnmatch(name, pattern):
                return True
        return False

    def _passes_severity_threshold(self, severity: Severity, threshold: Severity) -> bool:
        """Check if comment severity meets threshold."""
        return SEVERITY_ORDER[severity] >= SEVERITY_ORDER[threshold]
