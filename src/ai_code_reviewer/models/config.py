from pydantic import BaseModel, Field
from .review import Severity


class ProviderConfig(BaseModel):
    provider_id: str
    model: str = ""
    api_key: str = ""
    custom_endpoint: str | None = None
    custom_headers: dict[str, str] = Field(default_factory=dict)


class RepoConfig(BaseModel):
    languages: list[str] = Field(
        default_factory=lambda: [
            "javascript",
            "typescript",
            "python",
            "java",
            "csharp",
            "cpp",
            "c",
            "go",
            "rust",
            "php",
            "ruby",
            "swift",
            "kotlin",
        ]
    )
    exclude: list[str] = Field(
        default_factory=lambda: [
            "*.md",
            "*.lock",
            "*.min.js",
            "*.min.css",
            "*.generated.*",
            "package-lock.json",
            "yarn.lock",
            "pnpm-lock.yaml",
        ]
    )
    auto_review_on_save: bool = False
    min_severity: Severity = Severity.INFO
    parallel_review_count: int | None = Field(default=None, ge=1, le=10)
