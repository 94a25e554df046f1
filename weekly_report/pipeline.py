"""Report pipeline: fetch issues concurrently, summarize once, build rows.

The run has three phases:

1. Collect: issue metadata and in-window comments are fetched for every
   issue with bounded concurrency and reduced to an ``IssueCollection``.
2. Summarize: every collection that has update text goes into a single
   batch summarization call. Any failure falls back to raw text.
3. Build: collections and summaries become table rows and notes.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from .ai.models import BatchItem, BatchResult
from .ai.summarizer import Summarizer
from .errors import OperationCancelledError, WeeklyReportError
from .format.markdown import Row, render_table, sort_rows_by_target_date
from .format.notes import Note, NoteKind, count_notes_by_kind, render_notes
from .github_client.models import Comment, IssueData, IssueRef
from .report.select import select_most_recent_comment, select_reports
from .transport.cancel import CancelToken
from .utils.date_parser import parse_target_date, window_start
from .utils.status import Status, map_trending, parse_status_key

logger = logging.getLogger(__name__)

CLOSED_FALLBACK = "Issue was closed"


class IssueFetcher(Protocol):
    async def fetch_issue(self, ref: IssueRef, cancel: CancelToken) -> IssueData:
        ...

    async def fetch_comments_since(
        self, ref: IssueRef, since: datetime, cancel: CancelToken
    ) -> list[Comment]:
        ...


class IssueCollection(BaseModel):
    """Everything known about one issue before summarization."""

    model_config = ConfigDict(frozen=True)

    issue_url: str
    issue_title: str
    status: Status
    target_date: datetime | None = None
    reported_status: str = Field(
        "", description="Caption of the status the newest report claimed"
    )
    update_texts: list[str] = Field(
        default_factory=list, description="Texts to summarize, newest first"
    )
    should_summarize: bool = False
    fallback_summary: str = Field(..., description="Used when AI gives nothing")
    notes: list[Note] = Field(default_factory=list)


class ReportOutcome(BaseModel):
    """Rows and notes produced by one run."""

    rows: list[Row] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    errors: int = Field(0, description="Issues whose data could not be collected")
    cancelled: bool = False

    def render(self, include_notes: bool = True) -> str:
        output = render_table(self.rows)
        if include_notes and self.notes:
            output += "\n" + render_notes(self.notes)
        return output


def _closed_collection(
    ref: IssueRef,
    issue: IssueData,
    target_date: datetime | None,
    reported_status: str = "",
) -> IssueCollection:
    return IssueCollection(
        issue_url=ref.url,
        issue_title=issue.title,
        status=Status.DONE,
        target_date=target_date,
        reported_status=reported_status,
        update_texts=[issue.close_reason] if issue.close_reason.strip() else [],
        should_summarize=bool(issue.close_reason.strip()),
        fallback_summary=CLOSED_FALLBACK,
    )


async def collect_issue_data(
    fetcher: IssueFetcher,
    ref: IssueRef,
    since: datetime,
    since_days: int,
    cancel: CancelToken,
) -> IssueCollection:
    """Fetch one issue and decide its status, date and texts to summarize.

    Args:
        fetcher: Source of issue metadata and comments
        ref: Issue to collect
        since: Start of the reporting window
        since_days: Length of the window, used in notes and fallback text
        cancel: Cancellation token for the run

    Returns:
        The issue's collection
    """
    logger.debug(f"Collecting issue data for {ref.url}")
    issue = await fetcher.fetch_issue(ref, cancel)
    comments = await fetcher.fetch_comments_since(ref, since, cancel)
    reports = select_reports(comments, since)
    logger.debug(f"{ref}: {len(comments)} comments, {len(reports)} reports in window")

    window_note = Note(
        kind=NoteKind.NO_UPDATES_IN_WINDOW, issue_url=ref.url, since_days=since_days
    )

    if not reports:
        if issue.is_closed:
            return _closed_collection(ref, issue, issue.closed_at)

        latest = select_most_recent_comment(comments)
        if latest is not None:
            return IssueCollection(
                issue_url=ref.url,
                issue_title=issue.title,
                status=Status.NEEDS_UPDATE,
                update_texts=[latest],
                should_summarize=True,
                fallback_summary=latest,
                notes=[
                    Note(
                        kind=NoteKind.UNSTRUCTURED_FALLBACK,
                        issue_url=ref.url,
                        since_days=since_days,
                    )
                ],
            )

        return IssueCollection(
            issue_url=ref.url,
            issue_title=issue.title,
            status=Status.NEEDS_UPDATE,
            fallback_summary=f"No update provided in last {since_days} days",
            notes=[window_note],
        )

    newest = reports[0]
    status = map_trending(newest.trending_raw)
    reported_status = status.caption if newest.trending_raw else ""
    target_date = parse_target_date(newest.target_date_raw)
    update_texts = [report.update_raw for report in reports if report.update_raw]

    if not update_texts:
        if issue.is_closed:
            return _closed_collection(
                ref, issue, target_date or issue.closed_at, reported_status
            )
        return IssueCollection(
            issue_url=ref.url,
            issue_title=issue.title,
            status=Status.NEEDS_UPDATE,
            target_date=target_date,
            reported_status=reported_status,
            fallback_summary=f"No structured update found in last {since_days} days",
            notes=[window_note],
        )

    notes = []
    if len(reports) >= 2:
        notes.append(
            Note(
                kind=NoteKind.MULTIPLE_UPDATES,
                issue_url=ref.url,
                since_days=since_days,
            )
        )

    return IssueCollection(
        issue_url=ref.url,
        issue_title=issue.title,
        status=status,
        target_date=target_date,
        reported_status=reported_status,
        update_texts=update_texts,
        should_summarize=True,
        fallback_summary=update_texts[0],
        notes=notes,
    )


async def collect_all(
    fetcher: IssueFetcher,
    refs: Sequence[IssueRef],
    since: datetime,
    since_days: int,
    concurrency: int,
    cancel: CancelToken,
) -> tuple[list[IssueCollection], int]:
    """Collect every issue with at most ``concurrency`` in flight.

    Per-issue failures are logged and counted, not raised. Results are in
    completion order.

    Returns:
        Successful collections and the number of failed issues
    """
    semaphore = asyncio.Semaphore(concurrency)

    async def collect_one(
        ref: IssueRef,
    ) -> tuple[IssueRef, IssueCollection | Exception]:
        async with semaphore:
            try:
                return ref, await collect_issue_data(
                    fetcher, ref, since, since_days, cancel
                )
            except Exception as e:
                return ref, e

    tasks = [asyncio.create_task(collect_one(ref)) for ref in refs]

    collections: list[IssueCollection] = []
    errors = 0
    for completed, next_done in enumerate(asyncio.as_completed(tasks), start=1):
        ref, outcome = await next_done
        if isinstance(outcome, OperationCancelledError):
            logger.debug(f"Collection of {ref.url} cancelled")
        elif isinstance(outcome, Exception):
            errors += 1
            logger.error(f"Error collecting data for {ref.url}: {outcome}")
        else:
            collections.append(outcome)
        logger.info(f"Collecting issue data ({completed}/{len(tasks)})")

    if errors:
        logger.info(
            f"Data collection completed with {errors} errors, "
            f"{len(collections)} successful"
        )
    else:
        logger.info(f"Data collection completed: {len(collections)} issues")
    return collections, errors


def build_batch_items(collections: Sequence[IssueCollection]) -> list[BatchItem]:
    return [
        BatchItem(
            issue_url=c.issue_url,
            issue_title=c.issue_title,
            update_texts=c.update_texts,
            reported_status=c.reported_status,
        )
        for c in collections
        if c.should_summarize and c.update_texts
    ]


async def batch_summarize(
    summarizer: Summarizer,
    collections: Sequence[IssueCollection],
    cancel: CancelToken,
) -> dict[str, BatchResult]:
    """Summarize all collections in one batch call.

    Returns an empty map (so every row uses its fallback) when nothing needs
    summarizing or when summarization fails.
    """
    items = build_batch_items(collections)
    if not items:
        logger.debug("No items need summarization")
        return {}

    logger.info(f"Batch summarizing {len(items)} issues")
    try:
        results = await summarizer.summarize_batch(items, cancel)
    except WeeklyReportError as e:
        logger.warning(f"Batch summarization failed, using fallbacks: {e}")
        return {}

    logger.info(f"Batch summarization completed: {len(results)} summaries")
    return results


def _sentiment_note(
    collection: IssueCollection, result: BatchResult
) -> Note | None:
    if result.sentiment is None or not collection.reported_status:
        return None

    suggested = parse_status_key(result.sentiment.suggested_status)
    if suggested is None:
        logger.debug(
            f"Ignoring unknown suggested status {result.sentiment.suggested_status!r} "
            f"for {collection.issue_url}"
        )
        return None
    if suggested.caption == collection.reported_status:
        return None

    return Note(
        kind=NoteKind.SENTIMENT_MISMATCH,
        issue_url=collection.issue_url,
        reported_status=collection.reported_status,
        suggested_status=suggested.caption,
        explanation=result.sentiment.explanation,
    )


def build_results(
    collections: Sequence[IssueCollection], summaries: dict[str, BatchResult]
) -> tuple[list[Row], list[Note]]:
    """Turn collections into sorted rows plus notes."""
    rows = []
    notes = []
    for collection in collections:
        result = summaries.get(collection.issue_url)
        summary = result.summary if result is not None else ""
        rows.append(
            Row(
                status=collection.status,
                title=collection.issue_title,
                url=collection.issue_url,
                target_date=collection.target_date,
                update_md=summary or collection.fallback_summary,
            )
        )
        notes.extend(collection.notes)
        if result is not None:
            note = _sentiment_note(collection, result)
            if note is not None:
                notes.append(note)

    mismatches = count_notes_by_kind(notes, NoteKind.SENTIMENT_MISMATCH)
    logger.info(
        f"Results created: {len(rows)} rows, {len(notes)} notes "
        f"({mismatches} sentiment mismatches)"
    )
    return sort_rows_by_target_date(rows), notes


async def run_report(
    refs: Sequence[IssueRef],
    fetcher: IssueFetcher,
    summarizer: Summarizer,
    since_days: int,
    concurrency: int,
    cancel: CancelToken,
    now: datetime | None = None,
) -> ReportOutcome:
    """Run all three phases for the given issues.

    If the token fires mid-run, issues collected so far are still reported
    with their fallback text.
    """
    since = window_start(since_days, now)
    logger.debug(f"Looking for updates since {since:%Y-%m-%d}")
    logger.info(f"Collecting data for {len(refs)} issues (concurrency {concurrency})")

    collections, errors = await collect_all(
        fetcher, refs, since, since_days, concurrency, cancel
    )

    if cancel.cancelled:
        logger.warning(
            f"Run cancelled; reporting {len(collections)} collected issues "
            "without summaries"
        )
        summaries: dict[str, BatchResult] = {}
    else:
        summaries = await batch_summarize(summarizer, collections, cancel)

    rows, notes = build_results(collections, summaries)
    return ReportOutcome(
        rows=rows, notes=notes, errors=errors, cancelled=cancel.cancelled
    )
