"""Retry layer used by every outbound HTTP call.

Retry decisions are made from the response status and headers only, so the
body never has to be read (or re-read) to classify a failure.
"""

import logging
import random
import time
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..errors import RetryExhaustedError
from .cancel import CancelToken

logger = logging.getLogger(__name__)

RATE_LIMIT_HEADERS = ("X-RateLimit-Remaining", "Retry-After")


class RetryPolicy(BaseModel):
    """Backoff parameters for one family of outbound calls."""

    model_config = ConfigDict(frozen=True)

    name: str = Field("default", description="Label used in log messages")
    max_retries: int = Field(3, ge=0, description="Retries after the first attempt")
    base_delay: float = Field(1.0, ge=0, description="Backoff base in seconds")
    jitter: float = Field(
        0.25, ge=0, lt=1, description="Random spread as a fraction of the delay"
    )
    rate_limit_default_wait: float = Field(
        60.0, ge=0, description="Wait used when a rate limit gives no hint"
    )
    reset_buffer: float = Field(
        5.0, ge=0, description="Added to X-RateLimit-Reset to avoid racing it"
    )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff(self, attempt: int) -> float:
        """Exponential backoff for a zero-based attempt, with jitter applied."""
        delay = self.base_delay * (2**attempt)
        spread = delay * self.jitter
        return max(0.0, delay + random.uniform(-spread, spread))


GITHUB_RETRY_POLICY = RetryPolicy(name="github", jitter=0.25)
AI_RETRY_POLICY = RetryPolicy(name="github-models", jitter=0.10)


def has_rate_limit_headers(headers: Mapping[str, str]) -> bool:
    """Return True if the headers carry evidence of a rate limit."""
    return any(headers.get(name) for name in RATE_LIMIT_HEADERS)


def is_authorization_error(response: httpx.Response) -> bool:
    """Check for responses that must never be retried.

    401 is an invalid credential, 403 without rate-limit headers is usually an
    SSO or permission problem, and 404 may hide a private repository.
    """
    status = response.status_code
    if status == 401:
        return True
    if status == 403:
        return not has_rate_limit_headers(response.headers)
    return status == 404


def is_rate_limited(response: httpx.Response) -> bool:
    if response.status_code == 429:
        return True
    return response.status_code == 403 and has_rate_limit_headers(response.headers)


def should_retry(response: httpx.Response) -> bool:
    """Return True for server errors and rate limits."""
    return response.status_code >= 500 or is_rate_limited(response)


def rate_limit_delay(
    headers: Mapping[str, str], policy: RetryPolicy, now: float | None = None
) -> float:
    """Work out how long to wait before retrying a rate-limited request.

    Args:
        headers: Response headers of the rate-limited response
        policy: Policy supplying the reset buffer and default wait
        now: Current unix time, defaults to ``time.time()``

    Returns:
        Delay in seconds
    """
    retry_after = headers.get("Retry-After")
    if retry_after:
        try:
            return float(int(retry_after.strip()))
        except ValueError:
            pass

    reset = headers.get("X-RateLimit-Reset")
    if reset:
        try:
            reset_at = int(reset.strip())
        except ValueError:
            reset_at = None
        if reset_at is not None:
            remaining = reset_at - (time.time() if now is None else now)
            if remaining > 0:
                return remaining + policy.reset_buffer

    return policy.rate_limit_default_wait


class RetryTransport:
    """Send requests through an ``httpx.AsyncClient`` with retries.

    The transport keeps no per-call state: every attempt builds a fresh
    request from the call arguments, so one instance can be shared by any
    number of concurrent workers.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy = GITHUB_RETRY_POLICY,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.policy = policy
        self.logger = logger or logging.getLogger(__name__)

    async def request(
        self,
        method: str,
        url: str,
        *,
        cancel: CancelToken,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        """Send one logical request, retrying transient failures.

        Returns:
            The first response that is successful or not worth retrying
            (including 401/403/404, which callers turn into descriptive errors)

        Raises:
            RetryExhaustedError: If every attempt failed transiently
            OperationCancelledError: If ``cancel`` fires during a send or sleep
        """
        policy = self.policy
        last_error: BaseException | None = None
        last_status: int | None = None

        for attempt in range(policy.max_attempts):
            cancel.raise_if_cancelled()
            request = self.client.build_request(
                method, url, headers=headers, params=params, json=json, content=content
            )
            try:
                response = await cancel.run(self.client.send(request))
            except httpx.TransportError as e:
                last_error, last_status = e, None
                self.logger.debug(
                    f"{policy.name}: {method} {url} attempt {attempt + 1}/"
                    f"{policy.max_attempts} failed: {e!r}"
                )
                if attempt < policy.max_retries:
                    await cancel.sleep(policy.backoff(attempt))
                continue

            if is_authorization_error(response) or not should_retry(response):
                return response

            last_error, last_status = None, response.status_code
            if attempt >= policy.max_retries:
                await response.aclose()
                break

            if is_rate_limited(response):
                delay = rate_limit_delay(response.headers, policy)
            else:
                delay = policy.backoff(attempt)
            await response.aclose()

            self.logger.debug(
                f"{policy.name}: {method} {url} returned HTTP {last_status} "
                f"(attempt {attempt + 1}/{policy.max_attempts}), "
                f"retrying in {delay:.1f}s"
            )
            await cancel.sleep(delay)

        self.logger.debug(
            f"{policy.name}: {method} {url} gave up after "
            f"{policy.max_attempts} attempts"
        )
        raise RetryExhaustedError(policy.max_attempts, last_error, last_status)
