"""Exception hierarchy for weekly report generation."""


class WeeklyReportError(Exception):
    """Base class for all errors raised by weekly_report."""


class ConfigError(WeeklyReportError):
    """Raised when required configuration is missing or invalid."""


class OperationCancelledError(WeeklyReportError):
    """Raised when a cancellation token fires during a wait or request."""

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(message)


class RetryExhaustedError(WeeklyReportError):
    """Raised when a request keeps failing after every allowed attempt."""

    def __init__(
        self,
        attempts: int,
        last_error: BaseException | None = None,
        last_status: int | None = None,
    ) -> None:
        self.attempts = attempts
        self.last_error = last_error
        self.last_status = last_status
        if last_error is not None:
            detail = str(last_error) or type(last_error).__name__
        elif last_status is not None:
            detail = f"HTTP {last_status}"
        else:
            detail = "unknown error"
        super().__init__(f"request failed after {attempts} attempts: {detail}")


class GitHubAPIError(WeeklyReportError):
    """Raised when the GitHub API rejects or fails a request for an issue."""

    def __init__(
        self, message: str, issue: str | None = None, status_code: int | None = None
    ) -> None:
        self.issue = issue
        self.status_code = status_code
        super().__init__(message)


class ModelsAPIError(WeeklyReportError):
    """Raised when the AI completion backend returns an unusable response."""

    def __init__(
        self, message: str, status_code: int | None = None, body: str = ""
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class BatchParseError(WeeklyReportError):
    """Raised when no parser can extract summaries from a batch response."""


class BatchSummaryError(WeeklyReportError):
    """Raised when one chunk of a chunked batch summarization fails."""

    def __init__(self, chunk_index: int, cause: BaseException) -> None:
        self.chunk_index = chunk_index
        self.cause = cause
        super().__init__(f"chunk {chunk_index} failed: {cause}")
