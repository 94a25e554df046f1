"""Tests for target date parsing and rendering."""

from datetime import datetime, timedelta, timezone

import pytest

from weekly_report.utils.date_parser import (
    parse_target_date,
    render_target_date,
    window_start,
)


class TestParseTargetDate:
    """Test target date parsing."""

    def test_parse_iso_date(self) -> None:
        """Test parsing of plain ISO dates."""
        assert parse_target_date("2025-03-01") == datetime(
            2025, 3, 1, tzinfo=timezone.utc
        )

    def test_parse_rfc3339_zulu(self) -> None:
        """Test parsing of RFC 3339 timestamps with a Z suffix."""
        assert parse_target_date("2025-03-01T10:30:00Z") == datetime(
            2025, 3, 1, 10, 30, tzinfo=timezone.utc
        )

    def test_parse_rfc3339_offset(self) -> None:
        """Test offsets are normalized to UTC."""
        result = parse_target_date("2025-03-01T01:00:00+02:00")
        assert result == datetime(2025, 2, 28, 23, tzinfo=timezone.utc)
        assert render_target_date(result) == "2025-02-28"

    def test_parse_naive_datetime(self) -> None:
        """Test datetimes without a zone are taken as UTC."""
        assert parse_target_date("2025-03-01 08:00:00") == datetime(
            2025, 3, 1, 8, tzinfo=timezone.utc
        )

    @pytest.mark.parametrize("raw", ["", "  ", "TBD", "tbd", "N/A", "n/a"])
    def test_unset_values(self, raw: str) -> None:
        """Test placeholders for an unset date parse to None."""
        assert parse_target_date(raw) is None

    @pytest.mark.parametrize("raw", ["next sprint", "03/01/2025", "2025-13-01"])
    def test_unrecognized_values(self, raw: str) -> None:
        """Test unparseable text parses to None."""
        assert parse_target_date(raw) is None

    def test_whitespace_trimmed(self) -> None:
        """Test surrounding whitespace is ignored."""
        assert parse_target_date("  2025-03-01\n") == datetime(
            2025, 3, 1, tzinfo=timezone.utc
        )


class TestRenderTargetDate:
    """Test target date rendering."""

    def test_none_is_tbd(self) -> None:
        """Test a missing date renders as TBD."""
        assert render_target_date(None) == "TBD"

    def test_date_only(self) -> None:
        """Test dates render as YYYY-MM-DD."""
        value = datetime(2025, 3, 1, 15, 45, tzinfo=timezone.utc)
        assert render_target_date(value) == "2025-03-01"


class TestWindowStart:
    """Test look-back window calculation."""

    def test_days_subtracted(self) -> None:
        """Test the window starts the given number of days before now."""
        now = datetime(2025, 1, 15, 12, tzinfo=timezone.utc)
        assert window_start(7, now) == now - timedelta(days=7)

    def test_defaults_to_utc_now(self) -> None:
        """Test the current time is used when none is given."""
        result = window_start(1)
        assert result.tzinfo is not None
        delta = datetime.now(timezone.utc) - result
        assert timedelta(hours=23) < delta < timedelta(hours=25)

    @pytest.mark.parametrize("days", [0, -1])
    def test_non_positive_days(self, days: int) -> None:
        """Test zero or negative windows are rejected."""
        with pytest.raises(ValueError, match="positive integer"):
            window_start(days)
