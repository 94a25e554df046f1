"""Tests for GitHub issue URL parsing."""

import pytest

from weekly_report.github_client.links import (
    deduplicate_refs,
    parse_issue_links,
    parse_issue_url,
)
from weekly_report.github_client.models import IssueRef


class TestParseIssueUrl:
    """Test parse_issue_url function."""

    def test_valid_url(self) -> None:
        """Test a plain issue URL is parsed."""
        ref = parse_issue_url("https://github.com/octo/hello-world/issues/42")

        assert ref.owner == "octo"
        assert ref.repo == "hello-world"
        assert ref.number == 42
        assert ref.url == "https://github.com/octo/hello-world/issues/42"
        assert str(ref) == "octo/hello-world#42"

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/o/r/issues/7#issuecomment-123",
            "https://github.com/o/r/issues/7?q=1",
            "https://github.com/o/r/issues/7/",
            "  https://github.com/o/r/issues/7  ",
        ],
    )
    def test_suffixes_dropped(self, url: str) -> None:
        """Test fragments, queries and whitespace do not change the reference."""
        assert parse_issue_url(url).url == "https://github.com/o/r/issues/7"

    @pytest.mark.parametrize(
        "url",
        [
            "https://github.com/o/r/pull/7",
            "https://gitlab.com/o/r/issues/7",
            "http://github.com/o/r/issues/7",
            "https://github.com/o/r/issues/abc",
            "https://github.com/o/r/issues/7abc",
            "not a url",
        ],
    )
    def test_invalid_urls(self, url: str) -> None:
        """Test non-issue URLs are rejected."""
        with pytest.raises(ValueError, match="Invalid GitHub issue URL format"):
            parse_issue_url(url)


class TestParseIssueLinks:
    """Test parse_issue_links function."""

    def test_skips_blank_and_comment_lines(self) -> None:
        """Test blank lines and # comments are ignored."""
        lines = [
            "# sprint 12",
            "",
            "https://github.com/o/r/issues/1\n",
            "   ",
            "https://github.com/o/r/issues/2",
        ]
        refs = parse_issue_links(lines)
        assert [ref.number for ref in refs] == [1, 2]

    def test_deduplicates_in_order(self) -> None:
        """Test repeated issues keep their first position."""
        lines = [
            "https://github.com/o/r/issues/2",
            "https://github.com/o/r/issues/1",
            "https://github.com/o/r/issues/2#issuecomment-9",
        ]
        refs = parse_issue_links(lines)
        assert [ref.number for ref in refs] == [2, 1]

    def test_invalid_line_raises(self) -> None:
        """Test one bad line fails the whole input."""
        with pytest.raises(ValueError, match="not-a-url"):
            parse_issue_links(["https://github.com/o/r/issues/1", "not-a-url"])

    def test_empty_input(self) -> None:
        """Test no lines gives no references."""
        assert parse_issue_links([]) == []


class TestDeduplicateRefs:
    """Test deduplicate_refs function."""

    def test_equal_by_url(self) -> None:
        """Test references are compared by canonical URL."""
        a = IssueRef.from_parts("o", "r", 1)
        b = IssueRef.from_parts("o", "r", 1)
        c = IssueRef.from_parts("o", "r", 2)

        assert a == b
        assert len({a, b, c}) == 2
        assert deduplicate_refs([a, c, b]) == [a, c]
