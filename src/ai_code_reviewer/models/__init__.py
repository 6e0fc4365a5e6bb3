from .config import ProviderConfig, RepoConfig
from .review import ProviderDescriptor, ReviewComment, ReviewRequest, Severity

__all__ = [
    "ProviderConfig",
    "RepoConfig",
    "ProviderDescriptor",
    "ReviewComment",
    "ReviewRequest",
    "Severity",
]
