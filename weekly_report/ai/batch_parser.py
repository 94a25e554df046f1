"""Parse batch summarization responses back into per-issue results.

Models do not always follow the requested response shape, so parsing tries
an ordered list of parsers and keeps the first one that extracts anything:

1. nested JSON: ``{url: {"summary": "...", "sentiment": {...} | null}}``
2. flat JSON: ``{url: "summary"}``
3. markdown sections: ``## SUMMARY <url>`` followed by the summary text

The order is fixed. Later parsers accept more shapes and so are more likely
to attach text to the wrong issue.
"""

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any

from ..errors import BatchParseError
from .models import BatchItem, BatchResult, SentimentAssessment

logger = logging.getLogger(__name__)

SUMMARY_SECTION_MARKER = "## SUMMARY"

BatchParser = Callable[[str, Sequence[BatchItem]], dict[str, BatchResult] | None]

_CODE_FENCE_RE = re.compile(
    r"^```[a-zA-Z]*\s*\n(?P<body>.*?)\n?```$", re.DOTALL
)


def _strip_code_fence(text: str) -> str:
    text = text.strip()
    match = _CODE_FENCE_RE.match(text)
    return match.group("body") if match else text


def _load_json_object(response: str) -> dict[str, Any] | None:
    try:
        data = json.loads(_strip_code_fence(response))
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _parse_sentiment(value: Any) -> SentimentAssessment | None:
    if not isinstance(value, dict):
        return None
    status = value.get("status")
    if not isinstance(status, str) or not status.strip():
        return None
    explanation = value.get("explanation")
    return SentimentAssessment(
        suggested_status=status.strip(),
        explanation=explanation.strip() if isinstance(explanation, str) else "",
    )


def parse_nested_json(
    response: str, items: Sequence[BatchItem]
) -> dict[str, BatchResult] | None:
    """Parse ``{url: {"summary": str, "sentiment": obj | null}}``."""
    data = _load_json_object(response)
    if data is None:
        return None

    known = {item.issue_url for item in items}
    results: dict[str, BatchResult] = {}
    for url, value in data.items():
        if url not in known or not isinstance(value, dict):
            continue
        summary = value.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            continue
        results[url] = BatchResult(
            summary=summary.strip(), sentiment=_parse_sentiment(value.get("sentiment"))
        )
    return results or None


def parse_flat_json(
    response: str, items: Sequence[BatchItem]
) -> dict[str, BatchResult] | None:
    """Parse ``{url: "summary"}``. Sentiment is never present in this shape."""
    data = _load_json_object(response)
    if data is None:
        return None

    known = {item.issue_url for item in items}
    results = {
        url: BatchResult(summary=value.strip())
        for url, value in data.items()
        if url in known and isinstance(value, str) and value.strip()
    }
    return results or None


def match_issue_url(header: str, urls: Sequence[str]) -> str | None:
    """Find the known URL contained in a section header.

    When several URLs match (one URL can be a prefix of another, e.g.
    ``.../issues/1`` and ``.../issues/12``), the longest one wins.
    """
    matches = [url for url in urls if url and url in header]
    if not matches:
        return None
    return max(matches, key=len)


def parse_markdown_sections(
    response: str, items: Sequence[BatchItem]
) -> dict[str, BatchResult] | None:
    """Parse ``## SUMMARY <url>`` sections from a non-JSON response.

    Sections whose header does not contain a known issue URL are dropped.
    """
    try:
        json.loads(_strip_code_fence(response))
    except ValueError:
        pass
    else:
        return None

    urls = [item.issue_url for item in items]
    results: dict[str, BatchResult] = {}
    # Text before the first marker is preamble, not a section
    for section in response.split(SUMMARY_SECTION_MARKER)[1:]:
        header, _, body = section.strip().partition("\n")
        summary = body.strip()
        if not summary:
            continue
        url = match_issue_url(header, urls)
        if url is None:
            logger.debug(f"Dropping summary section with unknown header: {header!r}")
            continue
        results.setdefault(url, BatchResult(summary=summary))
    return results or None


BATCH_PARSERS: tuple[BatchParser, ...] = (
    parse_nested_json,
    parse_flat_json,
    parse_markdown_sections,
)


def parse_batch_response(
    response: str, items: Sequence[BatchItem]
) -> dict[str, BatchResult]:
    """Parse a batch response with the first parser that yields results.

    Args:
        response: Raw text content returned by the model
        items: The items the request was built from

    Returns:
        Map of issue URL to result, containing only URLs from ``items``

    Raises:
        BatchParseError: If no parser could extract a single entry
    """
    for parser in BATCH_PARSERS:
        results = parser(response, items)
        if results:
            logger.debug(
                f"Parsed {len(results)}/{len(items)} batch summaries "
                f"with {parser.__name__}"
            )
            return results

    raise BatchParseError(
        "could not parse batch response as nested JSON, flat JSON or markdown"
    )
