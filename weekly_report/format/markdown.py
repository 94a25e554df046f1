"""Markdown status table rendering."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..utils.date_parser import render_target_date
from ..utils.status import Status

TABLE_HEADER = (
    "| Status | Initiative/Epic | Target Date | Update |\n"
    "|--------|-----------------|-------------|--------|\n"
)


class Row(BaseModel):
    """One issue's line in the status table."""

    model_config = ConfigDict(frozen=True)

    status: Status = Field(..., description="Canonical status")
    title: str = Field(..., description="Issue title")
    url: str = Field(..., description="Issue URL")
    target_date: datetime | None = Field(None, description="None renders as TBD")
    update_md: str = Field("", description="Update summary in markdown")


def collapse_whitespace(content: str) -> str:
    """Replace line breaks, tabs and runs of spaces with single spaces."""
    return " ".join(content.split())


def escape_table_cell(content: str) -> str:
    """Escape text so it cannot break out of a table cell."""
    content = content.replace("\\", "\\\\").replace("|", "\\|")
    return collapse_whitespace(content)


def render_row(row: Row) -> str:
    status = f"{row.status.emoji} {row.status.caption}"
    epic = f"[{escape_table_cell(row.title)}]({row.url})"
    target = render_target_date(row.target_date)
    update = escape_table_cell(row.update_md)
    return f"| {status} | {epic} | {target} | {update} |\n"


def render_table(rows: list[Row]) -> str:
    """Render rows as a markdown table, or an empty string for no rows."""
    if not rows:
        return ""
    return TABLE_HEADER + "".join(render_row(row) for row in rows)


def _sort_priority(row: Row) -> int:
    if row.target_date is not None:
        return 1
    if row.status in (Status.NEEDS_UPDATE, Status.NOT_STARTED):
        return 3
    return 2


def sort_rows_by_target_date(rows: list[Row]) -> list[Row]:
    """Order rows for display.

    Dated rows come first in chronological order, then undated rows, then
    rows that need an update or have not started. Ties keep input order.
    """
    return sorted(
        rows,
        key=lambda row: (
            _sort_priority(row),
            row.target_date.timestamp() if row.target_date is not None else 0.0,
        ),
    )
