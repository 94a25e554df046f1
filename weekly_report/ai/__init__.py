"""AI summarization of status report updates."""

from .batch_parser import parse_batch_response
from .github_models import DEFAULT_BASE_URL, DEFAULT_MODEL, GitHubModelsClient
from .models import BatchItem, BatchResult, SentimentAssessment
from .summarizer import NoopSummarizer, Summarizer

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "BatchItem",
    "BatchResult",
    "GitHubModelsClient",
    "NoopSummarizer",
    "SentimentAssessment",
    "Summarizer",
    "parse_batch_response",
]
