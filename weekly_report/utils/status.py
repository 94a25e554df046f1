"""Canonical report statuses and free-text trending mapping."""

import re
from enum import Enum


class Status(str, Enum):
    """Canonical status, valued by its snake_case key."""

    ON_TRACK = "on_track"
    AT_RISK = "at_risk"
    OFF_TRACK = "off_track"
    NOT_STARTED = "not_started"
    NEEDS_UPDATE = "needs_update"
    SHAPING = "shaping"
    DONE = "done"
    UNKNOWN = "unknown"

    @property
    def key(self) -> str:
        return self.value

    @property
    def emoji(self) -> str:
        return _DISPLAY[self][0]

    @property
    def caption(self) -> str:
        return _DISPLAY[self][1]

    def __str__(self) -> str:
        return f"{self.emoji} {self.caption}"


_DISPLAY = {
    Status.ON_TRACK: (":green_circle:", "On Track"),
    Status.AT_RISK: (":yellow_circle:", "At Risk"),
    Status.OFF_TRACK: (":red_circle:", "Off Track"),
    Status.NOT_STARTED: (":white_circle:", "Not Started"),
    Status.NEEDS_UPDATE: (":white_circle:", "Needs Update"),
    Status.SHAPING: (":diamond_shape_with_a_dot_inside:", "Shaping"),
    Status.DONE: (":purple_circle:", "Done"),
    Status.UNKNOWN: (":black_circle:", "Unknown"),
}

# Checked in order; the first group with a substring match wins
_TRENDING_KEYWORDS: list[tuple[tuple[str, ...], Status]] = [
    (("on track", "green", "\U0001f7e2"), Status.ON_TRACK),
    (("at risk", "yellow", "\U0001f7e1"), Status.AT_RISK),
    (("off track", "blocked", "red", "\U0001f534"), Status.OFF_TRACK),
    (("not started", "white", "⚪"), Status.NOT_STARTED),
    (("done", "complete", "completed", "purple", "\U0001f7e3"), Status.DONE),
]

_LEADING_CIRCLE_RE = re.compile(
    "^[\U0001f7e2\U0001f7e1\U0001f534⚪\U0001f7e3]️?\\s*"
)


def map_trending(raw: str) -> Status:
    """Map a free-form trending value such as "🟡 at risk" to a Status.

    Matching is case-insensitive and by substring. Values that match no
    keyword map to UNKNOWN.
    """
    normalized = _LEADING_CIRCLE_RE.sub("", raw.strip()).strip().lower()
    if not normalized:
        return Status.UNKNOWN

    for keywords, status in _TRENDING_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return status
    return Status.UNKNOWN


def parse_status_key(key: str) -> Status | None:
    """Look up a status by snake_case key, None if the key is unknown."""
    try:
        return Status(key.strip().lower())
    except ValueError:
        return None
