from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ReviewComment(BaseModel):
    """One finding about a line of the reviewed text."""
    model_config = ConfigDict(frozen=True)

    message: str = Field(min_length=1)
    line: int = Field(ge=0)  # zero-based
    column: int = Field(default=0, ge=0)
    severity: Severity = Severity.INFO
    category: str | None = None


class ReviewRequest(BaseModel):
    api_key: str
    model: str
    diff_text: str
    language_id: str


class ProviderDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider_id: str
    display_name: str
    supports_custom_endpoint: bool = False
