"""Markdown rendering of the status table and notes."""

from .markdown import Row, render_table, sort_rows_by_target_date
from .notes import Note, NoteKind, render_notes

__all__ = [
    "Note",
    "NoteKind",
    "Row",
    "render_notes",
    "render_table",
    "sort_rows_by_target_date",
]
