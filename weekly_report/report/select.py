"""Select reports from an issue's comments within a time window."""

from collections.abc import Sequence
from datetime import datetime

from ..github_client.models import Comment
from .extract import Report, parse_report


def select_reports(comments: Sequence[Comment], since: datetime) -> list[Report]:
    """Return every report created at or after ``since``, newest first.

    Comments created exactly at ``since`` are kept. Reports with equal
    timestamps keep their input order.
    """
    reports = []
    for comment in comments:
        if comment.created_at < since:
            continue
        report = parse_report(comment.body, comment.created_at, comment.url)
        if report is not None:
            reports.append(report)

    # sorted() is stable, so ties stay in input order
    return sorted(reports, key=lambda r: r.created_at, reverse=True)


def select_most_recent_comment(comments: Sequence[Comment]) -> str | None:
    """Return the trimmed body of the last comment, ignoring the time window.

    Comments from the GitHub API arrive oldest first, so the last element is
    the most recent one. Returns None when there are no comments or the last
    body is blank.
    """
    if not comments:
        return None
    body = comments[-1].body.strip()
    return body or None
