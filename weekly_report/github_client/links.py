"""Parse GitHub issue URLs from line-oriented input."""

import re
from collections.abc import Iterable

from .models import IssueRef

GITHUB_ISSUE_URL_PATTERN = re.compile(
    r"^https://github\.com/([^/]+)/([^/]+)/issues/(\d+)(?:[/?#].*)?$"
)


def parse_issue_url(url: str) -> IssueRef:
    """Parse one GitHub issue URL into a canonical reference.

    Query strings and fragments are allowed and dropped from the canonical URL.

    Raises:
        ValueError: If the text is not a GitHub issue URL
    """
    match = GITHUB_ISSUE_URL_PATTERN.match(url.strip())
    if not match:
        raise ValueError(f"Invalid GitHub issue URL format: {url}")
    owner, repo, number = match.groups()
    return IssueRef.from_parts(owner, repo, int(number))


def parse_issue_links(lines: Iterable[str]) -> list[IssueRef]:
    """Parse issue URLs, one per line.

    Blank lines and lines starting with ``#`` are skipped. Duplicates (by
    canonical URL) are dropped, keeping the first occurrence.

    Args:
        lines: Input lines, e.g. an open file or ``sys.stdin``

    Returns:
        Unique issue references in input order

    Raises:
        ValueError: On the first line that is not a GitHub issue URL
    """
    refs = []
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        refs.append(parse_issue_url(line))
    return deduplicate_refs(refs)


def deduplicate_refs(refs: Iterable[IssueRef]) -> list[IssueRef]:
    """Drop repeated references while preserving order."""
    seen: set[str] = set()
    unique = []
    for ref in refs:
        if ref.url in seen:
            continue
        seen.add(ref.url)
        unique.append(ref)
    return unique
