"""Tests for batch response parsing."""

import json

import pytest

from weekly_report.ai.batch_parser import (
    match_issue_url,
    parse_batch_response,
    parse_flat_json,
    parse_markdown_sections,
    parse_nested_json,
)
from weekly_report.ai.models import BatchItem
from weekly_report.errors import BatchParseError

URL_1 = "https://github.com/org/repo/issues/1"
URL_12 = "https://github.com/org/repo/issues/12"
URL_2 = "https://github.com/org/repo/issues/2"

ITEMS = [
    BatchItem(issue_url=URL_1, issue_title="Auth", update_texts=["did auth"]),
    BatchItem(issue_url=URL_2, issue_title="Search", update_texts=["did search"]),
]


class TestNestedJson:
    """Test the nested JSON tier."""

    def test_summaries_and_sentiment(self) -> None:
        """Test summaries and sentiment are read for every item."""
        response = json.dumps(
            {
                URL_1: {"summary": "Auth is done.", "sentiment": None},
                URL_2: {
                    "summary": "Search is blocked.",
                    "sentiment": {
                        "status": "at_risk",
                        "explanation": "Blocked on upstream.",
                    },
                },
            }
        )
        results = parse_batch_response(response, ITEMS)

        assert set(results) == {URL_1, URL_2}
        assert results[URL_1].summary == "Auth is done."
        assert results[URL_1].sentiment is None
        sentiment = results[URL_2].sentiment
        assert sentiment is not None
        assert sentiment.suggested_status == "at_risk"
        assert sentiment.explanation == "Blocked on upstream."

    def test_blank_sentiment_status_is_absent(self) -> None:
        """Test a sentiment object without a status is dropped."""
        response = json.dumps(
            {
                URL_1: {
                    "summary": "Fine.",
                    "sentiment": {"status": " ", "explanation": "x"},
                }
            }
        )
        results = parse_nested_json(response, ITEMS)

        assert results is not None
        assert results[URL_1].sentiment is None

    def test_unknown_keys_dropped(self) -> None:
        """Test keys that were not in the request are discarded."""
        response = json.dumps(
            {
                URL_1: {"summary": "Auth.", "sentiment": None},
                "https://github.com/other/repo/issues/9": {"summary": "Stray."},
            }
        )
        results = parse_batch_response(response, ITEMS)

        assert set(results) == {URL_1}

    def test_blank_summary_dropped(self) -> None:
        """Test entries with an empty summary fall back to the caller."""
        response = json.dumps(
            {
                URL_1: {"summary": "  ", "sentiment": None},
                URL_2: {"summary": "Search.", "sentiment": None},
            }
        )
        results = parse_batch_response(response, ITEMS)

        assert set(results) == {URL_2}

    def test_code_fence_tolerated(self) -> None:
        """Test a JSON payload wrapped in a markdown code fence."""
        payload = json.dumps({URL_1: {"summary": "Fenced.", "sentiment": None}})
        response = f"```json\n{payload}\n```"
        results = parse_batch_response(response, ITEMS)

        assert results[URL_1].summary == "Fenced."

    def test_round_trip_many_items(self) -> None:
        """Test N items produce N entries with matching summaries."""
        items = [
            BatchItem(
                issue_url=f"https://github.com/o/r/issues/{i}", update_texts=["u"]
            )
            for i in range(1, 31)
        ]
        response = json.dumps(
            {
                item.issue_url: {"summary": f"summary {i}", "sentiment": None}
                for i, item in enumerate(items)
            }
        )
        results = parse_batch_response(response, items)

        assert len(results) == 30
        for i, item in enumerate(items):
            assert results[item.issue_url].summary == f"summary {i}"


class TestFlatJson:
    """Test the flat JSON tier."""

    def test_flat_shape(self) -> None:
        """Test plain string values are accepted without sentiment."""
        response = json.dumps({URL_1: "Auth is done.", URL_2: "Search is blocked."})

        assert parse_nested_json(response, ITEMS) is None
        results = parse_batch_response(response, ITEMS)

        assert results[URL_1].summary == "Auth is done."
        assert results[URL_2].summary == "Search is blocked."
        assert all(r.sentiment is None for r in results.values())

    def test_matches_nested_summaries(self) -> None:
        """Test flat and nested shapes of the same content agree."""
        summaries = {URL_1: "Auth is done.", URL_2: "Search is blocked."}
        nested_payload = {
            url: {"summary": summary, "sentiment": None}
            for url, summary in summaries.items()
        }
        nested = parse_batch_response(json.dumps(nested_payload), ITEMS)
        flat = parse_flat_json(json.dumps(summaries), ITEMS)

        assert flat == nested


class TestMarkdownSections:
    """Test the markdown tier."""

    def test_sections_parsed(self) -> None:
        """Test each section is attached to the URL in its header."""
        response = (
            "Here are the summaries.\n\n"
            f"## SUMMARY {URL_1}\nAuth is done.\n\n"
            f"## SUMMARY {URL_2}\nSearch is blocked.\nMore detail.\n"
        )
        results = parse_batch_response(response, ITEMS)

        assert results[URL_1].summary == "Auth is done."
        assert results[URL_2].summary == "Search is blocked.\nMore detail."
        assert all(r.sentiment is None for r in results.values())

    def test_matches_nested_summaries(self) -> None:
        """Test markdown and nested shapes of the same content agree."""
        nested = parse_batch_response(
            json.dumps(
                {
                    URL_1: {"summary": "Auth is done.", "sentiment": None},
                    URL_2: {"summary": "Search is blocked.", "sentiment": None},
                }
            ),
            ITEMS,
        )
        markdown = parse_batch_response(
            f"## SUMMARY {URL_1}\nAuth is done.\n"
            f"## SUMMARY {URL_2}\nSearch is blocked.",
            ITEMS,
        )

        assert markdown == nested

    def test_unmatched_sections_dropped(self) -> None:
        """Test sections naming unknown issues are ignored."""
        response = (
            "## SUMMARY https://github.com/x/y/issues/5\nStray.\n"
            f"## SUMMARY {URL_1}\nAuth.\n"
        )
        results = parse_batch_response(response, ITEMS)

        assert set(results) == {URL_1}

    def test_longest_url_wins(self) -> None:
        """Test a header naming issue 12 is not attributed to issue 1."""
        items = [
            BatchItem(issue_url=URL_1, update_texts=["a"]),
            BatchItem(issue_url=URL_12, update_texts=["b"]),
        ]
        response = f"## SUMMARY {URL_12}\nTwelve.\n## SUMMARY {URL_1}\nOne.\n"
        results = parse_batch_response(response, items)

        assert results[URL_12].summary == "Twelve."
        assert results[URL_1].summary == "One."

    def test_first_section_wins_for_duplicates(self) -> None:
        """Test a repeated URL keeps its first section."""
        response = f"## SUMMARY {URL_1}\nFirst.\n## SUMMARY {URL_1}\nSecond.\n"
        results = parse_markdown_sections(response, ITEMS)

        assert results is not None
        assert results[URL_1].summary == "First."

    def test_skipped_for_json(self) -> None:
        """Test the markdown tier does not run on JSON payloads."""
        response = json.dumps({"note": f"## SUMMARY {URL_1}\ntext"})
        assert parse_markdown_sections(response, ITEMS) is None


class TestMatchIssueUrl:
    """Test match_issue_url function."""

    def test_substring_match(self) -> None:
        """Test URLs are found inside surrounding header text."""
        assert match_issue_url(f"for <{URL_2}>:", [URL_1, URL_2]) == URL_2

    def test_longest_match(self) -> None:
        """Test the longest contained URL is chosen."""
        assert match_issue_url(URL_12, [URL_1, URL_12]) == URL_12

    def test_no_match(self) -> None:
        """Test None is returned for unknown headers."""
        assert match_issue_url("random header", [URL_1]) is None


class TestParseFailure:
    """Test unparseable responses."""

    @pytest.mark.parametrize(
        "response",
        [
            "I could not summarize these updates.",
            "",
            "[]",
            json.dumps({"https://github.com/x/y/issues/5": "Unknown issue"}),
        ],
    )
    def test_raises_parse_error(self, response: str) -> None:
        """Test responses with no usable entry raise BatchParseError."""
        with pytest.raises(BatchParseError, match="could not parse batch response"):
            parse_batch_response(response, ITEMS)
