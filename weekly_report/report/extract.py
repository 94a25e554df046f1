"""Parse status reports embedded in comment bodies as HTML comment markers.

A report comment looks like::

    <!-- data key="isReport" value="true" -->
    <!-- data key="trending" start -->🟢 on track<!-- data end -->
    <!-- data key="target_date" start -->2025-03-01<!-- data end -->
    <!-- data key="update" start -->
    Shipped the OAuth flow.
    <!-- data end -->

Matching is case-insensitive and tolerant of whitespace between tokens.
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

MARKER_IS_REPORT = '<!-- data key="isReport" value="true" -->'

_REPORT_MARKER_RE = re.compile(
    r'<!--\s*data\s+key\s*=\s*"isReport"\s+value\s*=\s*"true"\s*-->',
    re.IGNORECASE,
)

_DATA_BLOCK_RE = re.compile(
    r'<!--\s*data\s+key\s*=\s*"([^"]+)"\s+start\s*-->(.*?)<!--\s*data\s+end\s*-->',
    re.IGNORECASE | re.DOTALL,
)

# data block key -> Report field
_FIELD_FOR_KEY = {
    "trending": "trending_raw",
    "target_date": "target_date_raw",
    "update": "update_raw",
}


class Report(BaseModel):
    """A structured status report recovered from one comment."""

    model_config = ConfigDict(frozen=True)

    trending_raw: str = Field("", description="Raw trending/status text")
    target_date_raw: str = Field("", description="Raw target date text")
    update_raw: str = Field("", description="Raw update text, may be multi-line")
    created_at: datetime = Field(..., description="When the comment was created")
    source_url: str = Field("", description="URL of the source comment")


def parse_report(body: str, created_at: datetime, source_url: str) -> Report | None:
    """Extract a structured report from comment text.

    Args:
        body: Comment body text
        created_at: Creation time of the comment
        source_url: URL of the comment

    Returns:
        The report, or None if the comment has no report marker or none of
        the recognized data blocks holds a non-empty value
    """
    if not body or not _REPORT_MARKER_RE.search(body):
        return None

    fields: dict[str, str] = {}
    for key, value in _DATA_BLOCK_RE.findall(body):
        field = _FIELD_FOR_KEY.get(key.strip().lower())
        value = value.strip()
        if field is None or not value:
            continue
        fields[field] = value

    if not fields:
        return None

    return Report(created_at=created_at, source_url=source_url, **fields)
