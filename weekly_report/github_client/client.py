"""GitHub REST API client for issue metadata and comments."""

import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from .. import __version__
from ..errors import GitHubAPIError, RetryExhaustedError
from ..transport.cancel import CancelToken
from ..transport.retry import GITHUB_RETRY_POLICY, RetryPolicy, RetryTransport
from .models import Comment, IssueData, IssueRef

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_CLOSE_REASON = "Issue was closed"
COMMENTS_PER_PAGE = 100
EVENTS_PER_PAGE = 100
# Closing comments are posted by the closer within this window of the event
CLOSE_COMMENT_WINDOW = timedelta(minutes=1)
RATE_LIMIT_WARNING_THRESHOLD = 10


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO 8601 timestamp into an aware UTC datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class GitHubClient:
    """GitHub API client with retries and descriptive error messages."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = DEFAULT_API_URL,
        policy: RetryPolicy = GITHUB_RETRY_POLICY,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
            base_url: REST API base URL
            policy: Retry policy for every request
            timeout: HTTP timeout in seconds for each attempt
            http_client: Pre-built client, mainly for tests
            logger: Logger for progress messages
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.base_url = base_url.rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self.http = http_client or httpx.AsyncClient(timeout=timeout)
        self.transport = RetryTransport(self.http, policy, self.logger)
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"weekly-report/{__version__}",
        }

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def fetch_issue(self, ref: IssueRef, cancel: CancelToken) -> IssueData:
        """Get issue metadata, including the closing comment for closed issues.

        Args:
            ref: Issue to fetch
            cancel: Cancellation token for the run

        Returns:
            IssueData for the issue

        Raises:
            GitHubAPIError: If the issue cannot be fetched
        """
        self.logger.debug(f"Fetching issue metadata for {ref}")
        url = f"{self.base_url}/repos/{ref.owner}/{ref.repo}/issues/{ref.number}"
        payload = await self._get_json(url, ref, cancel)

        closed_at = payload.get("closed_at")
        issue = IssueData(
            url=payload.get("html_url") or ref.url,
            title=payload.get("title") or "",
            state=payload.get("state") or "open",
            labels=[label["name"] for label in payload.get("labels") or []],
            assignees=[user["login"] for user in payload.get("assignees") or []],
            closed_at=parse_timestamp(closed_at) if closed_at else None,
        )
        self.logger.debug(f"Issue {ref} fetched: {issue.title!r} ({issue.state})")

        if issue.is_closed:
            close_reason = await self._find_close_reason(ref, cancel)
            issue = issue.model_copy(update={"close_reason": close_reason})

        return issue

    async def fetch_comments_since(
        self, ref: IssueRef, since: datetime, cancel: CancelToken
    ) -> list[Comment]:
        """Fetch every comment created at or after ``since``.

        Follows ``Link: rel="next"`` pagination. The API's ``since`` filter
        matches on update time, so creation time is filtered again here.

        Args:
            ref: Issue whose comments to fetch
            since: Inclusive lower bound on comment creation time
            cancel: Cancellation token for the run

        Returns:
            Comments in API order (oldest first)
        """
        self.logger.debug(f"Fetching comments for {ref} since {since:%Y-%m-%d}")
        url: str | None = (
            f"{self.base_url}/repos/{ref.owner}/{ref.repo}/issues/{ref.number}/comments"
        )
        params: dict[str, Any] | None = {
            "since": since.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
            "per_page": COMMENTS_PER_PAGE,
        }

        comments: list[Comment] = []
        page = 1
        while url:
            response = await self._get(url, ref, cancel, params=params)
            page_comments = [self._convert_comment(item) for item in response.json()]
            kept = [c for c in page_comments if c.created_at >= since]
            self.logger.debug(
                f"Comments page {page} for {ref}: {len(kept)}/{len(page_comments)} "
                "in window"
            )
            comments.extend(kept)

            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None
            page += 1

        self.logger.debug(f"Fetched {len(comments)} comments for {ref}")
        return comments

    def _convert_comment(self, item: dict[str, Any]) -> Comment:
        user = item.get("user") or {}
        return Comment(
            body=item.get("body") or "",
            author=user.get("login") or "",
            created_at=parse_timestamp(item["created_at"]),
            url=item.get("html_url") or "",
        )

    async def _find_close_reason(self, ref: IssueRef, cancel: CancelToken) -> str:
        """Find the comment posted alongside the latest manual close event.

        Lookup failures are not fatal; the default reason is returned instead.
        """
        base = f"{self.base_url}/repos/{ref.owner}/{ref.repo}/issues/{ref.number}"
        try:
            events = await self._get_json(
                f"{base}/events", ref, cancel, params={"per_page": EVENTS_PER_PAGE}
            )
            close_event = next(
                (
                    event
                    for event in reversed(events)
                    if event.get("event") == "closed" and not event.get("commit_id")
                ),
                None,
            )
            if close_event is None:
                return DEFAULT_CLOSE_REASON

            actor = (close_event.get("actor") or {}).get("login")
            if not actor:
                return DEFAULT_CLOSE_REASON

            closed_time = parse_timestamp(close_event["created_at"])
            window_start = closed_time - CLOSE_COMMENT_WINDOW
            items = await self._get_json(
                f"{base}/comments",
                ref,
                cancel,
                params={
                    "since": window_start.strftime("%Y-%m-%dT%H:%M:%SZ"),
                    "per_page": 10,
                },
            )
        except GitHubAPIError as e:
            self.logger.debug(f"Could not look up close reason for {ref}: {e}")
            return DEFAULT_CLOSE_REASON

        for item in items:
            comment = self._convert_comment(item)
            if comment.author != actor:
                continue
            if abs(comment.created_at - closed_time) >= CLOSE_COMMENT_WINDOW:
                continue
            body = comment.body.strip()
            if body:
                return body

        return DEFAULT_CLOSE_REASON

    async def _get_json(
        self,
        url: str,
        ref: IssueRef,
        cancel: CancelToken,
        params: dict[str, Any] | None = None,
    ) -> Any:
        response = await self._get(url, ref, cancel, params=params)
        return response.json()

    async def _get(
        self,
        url: str,
        ref: IssueRef,
        cancel: CancelToken,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        try:
            response = await self.transport.request(
                "GET", url, cancel=cancel, headers=self.headers, params=params
            )
        except RetryExhaustedError as e:
            self.logger.debug(f"GitHub API request for {ref} failed: {e}")
            raise self._enhance_exhausted(e, ref) from e

        self._check_rate_limit(response)
        if not response.is_success:
            self.logger.debug(
                f"GitHub API request for {ref} returned HTTP {response.status_code}"
            )
            raise self._enhance_error(response, ref)
        return response

    def _check_rate_limit(self, response: httpx.Response) -> None:
        """Warn when the remaining request budget is running low."""
        remaining = response.headers.get("X-RateLimit-Remaining")
        if remaining is None or not remaining.strip().isdigit():
            return
        if int(remaining) < RATE_LIMIT_WARNING_THRESHOLD:
            self.logger.warning(f"GitHub API rate limit low: {remaining} remaining")

    def _enhance_error(self, response: httpx.Response, ref: IssueRef) -> GitHubAPIError:
        """Turn an error response into an actionable message."""
        status = response.status_code
        if status == 401:
            message = (
                f"GitHub API authentication failed for {ref}. Please check your "
                "GITHUB_TOKEN is valid and has the required permissions"
            )
        elif status == 403:
            api_message = _error_message(response).lower()
            if "sso" in api_message or "organization" in api_message:
                message = (
                    f"GitHub API access denied for {ref}. Your token may require "
                    "SSO authorization for this organization. Visit: "
                    "https://github.com/settings/tokens and authorize your token "
                    "for SSO"
                )
            else:
                message = (
                    f"GitHub API access denied for {ref}. Your token may not have "
                    "sufficient permissions to access this repository"
                )
        elif status == 404:
            message = (
                f"GitHub issue {ref} not found. This could mean the repository is "
                "private and your token lacks access, or the issue doesn't exist"
            )
        else:
            detail = _error_message(response) or response.reason_phrase
            message = f"GitHub API returned HTTP {status} for {ref}: {detail}"
        return GitHubAPIError(message, issue=str(ref), status_code=status)

    def _enhance_exhausted(
        self, error: RetryExhaustedError, ref: IssueRef
    ) -> GitHubAPIError:
        if isinstance(error.last_error, httpx.TimeoutException):
            message = (
                f"GitHub API request timed out for {ref}. Please check your "
                "network connection and try again"
            )
        else:
            message = f"GitHub API request failed for {ref}: {error}"
        return GitHubAPIError(message, issue=str(ref), status_code=error.last_status)


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        return str(payload.get("message") or "")
    return ""
