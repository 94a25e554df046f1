"""Status, date and logging helpers."""

from .date_parser import parse_target_date, render_target_date, window_start
from .status import Status, map_trending, parse_status_key

__all__ = [
    "Status",
    "map_trending",
    "parse_status_key",
    "parse_target_date",
    "render_target_date",
    "window_start",
]
