"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from weekly_report.github_client.models import Comment
from weekly_report.report.extract import MARKER_IS_REPORT
from weekly_report.transport.cancel import CancelToken
from weekly_report.transport.retry import RetryPolicy

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def report_body(
    trending: str = "", target_date: str = "", update: str = "", marker: bool = True
) -> str:
    """Build a comment body carrying a structured status report."""
    parts = [MARKER_IS_REPORT] if marker else []
    for key, value in (
        ("trending", trending),
        ("target_date", target_date),
        ("update", update),
    ):
        if value:
            parts.append(f'<!-- data key="{key}" start -->{value}<!-- data end -->')
    return "\n".join(parts)


@pytest.fixture
def make_comment() -> Callable[..., Comment]:
    """Factory for comments created relative to a fixed clock."""

    def _make(
        body: str, created_at: datetime = NOW, author: str = "octocat", url: str = ""
    ) -> Comment:
        return Comment(body=body, author=author, created_at=created_at, url=url)

    return _make


@pytest.fixture
def cancel() -> CancelToken:
    return CancelToken()


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Retry policy that never actually waits."""
    return RetryPolicy(name="test", base_delay=0.0, rate_limit_default_wait=0.0)


@pytest.fixture
def build_report() -> Callable[..., str]:
    """Factory for comment bodies carrying a status report."""
    return report_body
