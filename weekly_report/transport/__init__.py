"""HTTP transport helpers shared by the GitHub and GitHub Models clients."""

from .cancel import CancelToken
from .retry import (
    AI_RETRY_POLICY,
    GITHUB_RETRY_POLICY,
    RetryPolicy,
    RetryTransport,
)

__all__ = [
    "AI_RETRY_POLICY",
    "GITHUB_RETRY_POLICY",
    "CancelToken",
    "RetryPolicy",
    "RetryTransport",
]
