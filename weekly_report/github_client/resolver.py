"""Resolve the set of issues to report on from a URL list and/or a project."""

import logging
import sys
from enum import Enum
from collections.abc import Sequence
from typing import Protocol, TextIO

from ..config import ResolverConfig
from ..errors import ConfigError
from ..transport.cancel import CancelToken
from .links import deduplicate_refs, parse_issue_links
from .models import IssueRef

logger = logging.getLogger(__name__)

MIN_PROJECT_ITEMS = 1
MAX_PROJECT_ITEMS = 1000


class InputMode(str, Enum):
    UNKNOWN = "unknown"
    URL_LIST = "url_list"
    PROJECT = "project"
    MIXED = "mixed"

    @property
    def label(self) -> str:
        return {
            InputMode.UNKNOWN: "Unknown",
            InputMode.URL_LIST: "URL List",
            InputMode.PROJECT: "Project",
            InputMode.MIXED: "Mixed (Project + URL List)",
        }[self]


class ProjectItemSource(Protocol):
    """Anything that can list the issues on a project board."""

    async def fetch_project_items(
        self, config: ResolverConfig, cancel: CancelToken
    ) -> list[IssueRef]:
        ...


def detect_input_mode(config: ResolverConfig) -> InputMode:
    has_project = bool(config.project_url)
    has_url_list = config.use_stdin or bool(config.url_list_path)

    if has_project and has_url_list:
        return InputMode.MIXED
    if has_project:
        return InputMode.PROJECT
    if has_url_list:
        return InputMode.URL_LIST
    return InputMode.UNKNOWN


def validate_config(config: ResolverConfig) -> None:
    """Check project settings.

    Raises:
        ConfigError: If project_max_items is out of range
    """
    if not config.project_url:
        return
    if not MIN_PROJECT_ITEMS <= config.project_max_items <= MAX_PROJECT_ITEMS:
        raise ConfigError(
            f"--project-max-items must be between {MIN_PROJECT_ITEMS} and "
            f"{MAX_PROJECT_ITEMS}, got {config.project_max_items}"
        )


def parse_field_values(raw: str) -> list[str]:
    """Split a comma-separated list, trimming items and dropping empty ones."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def read_url_list(
    config: ResolverConfig, stdin: TextIO | None = None
) -> list[IssueRef]:
    """Read issue references from the configured file or stdin.

    Raises:
        ConfigError: If the input file cannot be opened
        ValueError: If a line is not a GitHub issue URL
    """
    if config.use_stdin:
        return parse_issue_links(stdin or sys.stdin)

    try:
        with open(config.url_list_path, encoding="utf-8") as f:
            return parse_issue_links(f)
    except OSError as e:
        raise ConfigError(
            f"Failed to open input file {config.url_list_path}: {e}"
        ) from e


async def resolve_issue_refs(
    config: ResolverConfig,
    project_source: ProjectItemSource | None,
    cancel: CancelToken,
    stdin: TextIO | None = None,
    url_refs: Sequence[IssueRef] | None = None,
) -> list[IssueRef]:
    """Collect de-duplicated issue references from every configured source.

    Project items come first, then URL-list items, and the first occurrence
    of each issue is kept.

    Args:
        config: Input settings
        project_source: Project board item source, required in project modes
        cancel: Cancellation token for the run
        stdin: Stream used instead of ``sys.stdin`` when reading URLs
        url_refs: URL-list items already read by the caller, skips reading
            the file or stdin

    Returns:
        Unique issue references

    Raises:
        ConfigError: If no input is configured or the config is invalid
        ValueError: If the URL list contains an invalid line
    """
    validate_config(config)

    mode = detect_input_mode(config)
    logger.info(f"Input mode detected: {mode.label}")
    if mode is InputMode.UNKNOWN:
        raise ConfigError(
            "No valid input provided: specify a project or provide issue URLs "
            "via stdin/--input"
        )

    refs: list[IssueRef] = []
    if mode in (InputMode.PROJECT, InputMode.MIXED):
        if project_source is None:
            raise ConfigError("Project input requires a project item source")
        logger.debug(f"Fetching issues from project board {config.project_url}")
        project_refs = await project_source.fetch_project_items(config, cancel)
        logger.info(f"Issues fetched from project: {len(project_refs)}")
        refs.extend(project_refs)

    if mode in (InputMode.URL_LIST, InputMode.MIXED):
        if url_refs is None:
            url_refs = read_url_list(config, stdin)
        logger.info(f"Issues read from URL list: {len(url_refs)}")
        refs.extend(url_refs)

    unique = deduplicate_refs(refs)
    logger.info(f"Input resolution complete: {len(unique)} unique issues")
    return unique
