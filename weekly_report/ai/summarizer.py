"""Summarizer interface and the no-op implementation used when AI is disabled."""

from collections.abc import Sequence
from typing import Protocol

from ..transport.cancel import CancelToken
from .models import BatchItem, BatchResult


class Summarizer(Protocol):
    """AI-powered summarization of status report updates."""

    async def summarize(
        self, issue_title: str, issue_url: str, update_text: str, cancel: CancelToken
    ) -> str:
        """Summarize a single update."""
        ...

    async def summarize_many(
        self,
        issue_title: str,
        issue_url: str,
        updates: Sequence[str],
        cancel: CancelToken,
    ) -> str:
        """Summarize several updates (newest first) of one issue."""
        ...

    async def summarize_batch(
        self, items: Sequence[BatchItem], cancel: CancelToken
    ) -> dict[str, BatchResult]:
        """Summarize many issues at once, keyed by issue URL."""
        ...


class NoopSummarizer:
    """Return raw update text without calling any model."""

    async def summarize(
        self, issue_title: str, issue_url: str, update_text: str, cancel: CancelToken
    ) -> str:
        return update_text.strip()

    async def summarize_many(
        self,
        issue_title: str,
        issue_url: str,
        updates: Sequence[str],
        cancel: CancelToken,
    ) -> str:
        return " ".join(updates).strip()

    async def summarize_batch(
        self, items: Sequence[BatchItem], cancel: CancelToken
    ) -> dict[str, BatchResult]:
        return {
            item.issue_url: BatchResult(summary=" ".join(item.update_texts).strip())
            for item in items
        }
