"""GitHub Models (OpenAI-compatible chat completions) summarizer."""

import json
import logging
from collections.abc import Sequence
from typing import Any

import httpx

from .. import __version__
from ..errors import (
    BatchSummaryError,
    ModelsAPIError,
    OperationCancelledError,
    WeeklyReportError,
)
from ..transport.cancel import CancelToken
from ..transport.retry import AI_RETRY_POLICY, RetryPolicy, RetryTransport
from .batch_parser import parse_batch_response
from .models import BatchItem, BatchResult, ChatRequest
from .prompts import DEFAULT_SUMMARY_PROMPT, batch_system_prompt

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://models.github.ai"
DEFAULT_MODEL = "gpt-5-mini"
DEFAULT_TIMEOUT = 120.0
TEMPERATURE = 1.0
# Maximum items per request, keeps prompts within backend token limits
MAX_BATCH_SIZE = 25


class GitHubModelsClient:
    """Summarizer backed by the GitHub Models chat completions endpoint."""

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        system_prompt: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        sentiment: bool = True,
        max_batch_size: int = MAX_BATCH_SIZE,
        policy: RetryPolicy = AI_RETRY_POLICY,
        http_client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Bearer token for the GitHub Models API
            base_url: API base URL
            model: Model name sent with every request
            system_prompt: Custom single-item prompt, default prompt if empty
            timeout: HTTP timeout in seconds for each attempt
            sentiment: Ask the model to flag status/update mismatches in batches
            max_batch_size: Maximum items per batch request before chunking
            policy: Retry policy for API calls
            http_client: Pre-built client, mainly for tests
            logger: Logger for progress and retry messages
        """
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be at least 1")

        self.base_url = base_url.rstrip("/")
        self.model = model
        self.custom_prompt = system_prompt
        self.sentiment = sentiment
        self.max_batch_size = max_batch_size
        self.logger = logger or logging.getLogger(__name__)
        self.http = http_client or httpx.AsyncClient(timeout=timeout)
        self.transport = RetryTransport(self.http, policy, self.logger)
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"weekly-report/{__version__}",
        }

    @property
    def system_prompt(self) -> str:
        return self.custom_prompt or DEFAULT_SUMMARY_PROMPT

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "GitHubModelsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def summarize(
        self, issue_title: str, issue_url: str, update_text: str, cancel: CancelToken
    ) -> str:
        """Summarize a single update, returning the model text as-is."""
        self.logger.debug(f"AI summarizing single update for {issue_url}")
        user_prompt = f"Issue: {issue_title} ({issue_url})\nUpdate:\n{update_text}"
        request = ChatRequest.build(
            self.model, self.system_prompt, user_prompt, TEMPERATURE
        )
        return await self._complete(request, cancel)

    async def summarize_many(
        self,
        issue_title: str,
        issue_url: str,
        updates: Sequence[str],
        cancel: CancelToken,
    ) -> str:
        """Summarize several updates of one issue, newest first."""
        self.logger.debug(
            f"AI summarizing {len(updates)} updates for {issue_url}"
        )
        lines = [f"Issue: {issue_title} ({issue_url})", "Updates (newest first):"]
        lines.extend(f"{i}) {update}" for i, update in enumerate(updates, start=1))
        request = ChatRequest.build(
            self.model, self.system_prompt, "\n".join(lines), TEMPERATURE
        )
        return await self._complete(request, cancel)

    def build_batch_prompt(self, items: Sequence[BatchItem]) -> str:
        """Serialize batch items into the JSON user prompt."""
        payload = {
            "items": [
                {
                    "id": item.issue_url,
                    "issue": item.issue_title,
                    "updates": list(item.update_texts),
                    "reported_status": item.reported_status,
                }
                for item in items
            ]
        }
        return json.dumps(payload, ensure_ascii=False)

    async def summarize_batch(
        self, items: Sequence[BatchItem], cancel: CancelToken
    ) -> dict[str, BatchResult]:
        """Summarize many issues, chunking large batches.

        Returns:
            Map of issue URL to result. Issues missing from the map should use
            fallback text.

        Raises:
            BatchSummaryError: If one chunk of a chunked batch fails
            BatchParseError: If the response of an unchunked batch is unusable
            ModelsAPIError: If the API returns an error or empty response
        """
        if not items:
            return {}

        if len(items) > self.max_batch_size:
            return await self._summarize_chunked(items, cancel)

        return await self._summarize_chunk(items, cancel)

    async def _summarize_chunked(
        self, items: Sequence[BatchItem], cancel: CancelToken
    ) -> dict[str, BatchResult]:
        size = self.max_batch_size
        chunks = [items[i : i + size] for i in range(0, len(items), size)]
        self.logger.debug(
            f"Splitting batch of {len(items)} items into {len(chunks)} chunks"
        )

        # Chunks run one after another; they share one rate limit budget
        results: dict[str, BatchResult] = {}
        for index, chunk in enumerate(chunks, start=1):
            self.logger.debug(f"Processing batch chunk {index} ({len(chunk)} items)")
            try:
                chunk_results = await self._summarize_chunk(chunk, cancel)
            except OperationCancelledError:
                raise
            except WeeklyReportError as e:
                raise BatchSummaryError(index, e) from e
            results.update(chunk_results)
        return results

    async def _summarize_chunk(
        self, items: Sequence[BatchItem], cancel: CancelToken
    ) -> dict[str, BatchResult]:
        self.logger.debug(f"AI batch summarizing {len(items)} items with {self.model}")
        request = ChatRequest.build(
            self.model,
            batch_system_prompt(self.sentiment),
            self.build_batch_prompt(items),
            TEMPERATURE,
        )
        content = await self._complete(request, cancel)
        results = parse_batch_response(content, items)
        self.logger.debug(f"Batch summarization returned {len(results)} summaries")
        return results

    async def _complete(self, request: ChatRequest, cancel: CancelToken) -> str:
        """Send a chat completion request and return the first choice text."""
        url = f"{self.base_url}/inference/chat/completions"
        try:
            response = await self.transport.request(
                "POST",
                url,
                cancel=cancel,
                headers=self.headers,
                json=request.model_dump(),
            )
        except httpx.HTTPError as e:
            raise ModelsAPIError(f"GitHub Models request failed: {e!r}") from e

        if not response.is_success:
            body = response.text
            raise ModelsAPIError(
                f"GitHub Models API returned HTTP {response.status_code}: "
                f"{body[:500]}",
                status_code=response.status_code,
                body=body,
            )

        try:
            payload: Any = response.json()
        except ValueError as e:
            raise ModelsAPIError(
                f"GitHub Models API returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

        choices = payload.get("choices") if isinstance(payload, dict) else None
        if not isinstance(choices, list) or not choices:
            raise ModelsAPIError(
                "GitHub Models API returned empty response",
                status_code=response.status_code,
            )

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ModelsAPIError(
                "GitHub Models API response has no message content",
                status_code=response.status_code,
            )
        return content
