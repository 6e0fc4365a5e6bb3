"""Exceptions raised by providers, the registry and configuration checks."""


class ReviewerError(Exception):
    """Base exception for the reviewer."""

    pass


class ConfigurationError(ReviewerError):
    """Raised when provider, credential, model or endpoint settings are unusable."""

    pass


class ProviderError(ReviewerError):
    """Raised when a review backend call fails."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class AuthenticationError(ProviderError):
    """Raised when the backend rejects the credential (401/403)."""

    def __init__(self, message: str, provider: str | None = None, status_code: int | None = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class RateLimitError(ProviderError):
    """Raised when the backend answers 429."""

    def __init__(self, message: str, provider: str | None = None, retry_after: int | None = None):
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class UpstreamError(ProviderError):
    """Raised for any other transport, HTTP or decode failure."""

    def __init__(self, message: str, provider: str | None = None, status_code: int | None = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code
