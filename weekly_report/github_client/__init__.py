"""GitHub API access and issue input resolution."""

from .client import GitHubClient
from .links import deduplicate_refs, parse_issue_links, parse_issue_url
from .models import Comment, IssueData, IssueRef
from .resolver import (
    InputMode,
    ProjectItemSource,
    detect_input_mode,
    parse_field_values,
    resolve_issue_refs,
)

__all__ = [
    "Comment",
    "GitHubClient",
    "InputMode",
    "IssueData",
    "IssueRef",
    "ProjectItemSource",
    "deduplicate_refs",
    "detect_input_mode",
    "parse_field_values",
    "parse_issue_links",
    "parse_issue_url",
    "resolve_issue_refs",
]
