"""Notes section explaining how individual rows were derived."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NoteKind(str, Enum):
    MULTIPLE_UPDATES = "multiple_updates"
    NO_UPDATES_IN_WINDOW = "no_updates_in_window"
    UNSTRUCTURED_FALLBACK = "unstructured_fallback"
    SENTIMENT_MISMATCH = "sentiment_mismatch"


class Note(BaseModel):
    """A remark about one issue's status reporting."""

    model_config = ConfigDict(frozen=True)

    kind: NoteKind
    issue_url: str
    since_days: int = Field(0, description="Length of the look-back window")
    reported_status: str = Field("", description="Caption the issue reported")
    suggested_status: str = Field("", description="Caption AI suggests instead")
    explanation: str = Field("", description="AI explanation of the mismatch")


def pluralize_days(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def render_note(note: Note) -> str:
    """Render the bullet text (without the leading dash) for one note."""
    if note.kind is NoteKind.MULTIPLE_UPDATES:
        return (
            f"{note.issue_url}: multiple structured updates in last "
            f"{pluralize_days(note.since_days)}"
        )
    if note.kind is NoteKind.NO_UPDATES_IN_WINDOW:
        return f"{note.issue_url}: no update in last {pluralize_days(note.since_days)}"
    if note.kind is NoteKind.UNSTRUCTURED_FALLBACK:
        return (
            f"{note.issue_url}: no structured update found; summary derived from "
            "most recent comment"
        )
    return (
        f"{note.issue_url}: reported as {note.reported_status}, but sentiment "
        f"suggests {note.suggested_status}: {note.explanation}"
    )


def render_notes(notes: list[Note]) -> str:
    """Render a ``## Notes`` section, or an empty string for no notes."""
    if not notes:
        return ""
    bullets = "".join(f"- {render_note(note)}\n" for note in notes)
    return f"## Notes\n\n{bullets}"


def count_notes_by_kind(notes: list[Note], kind: NoteKind) -> int:
    return sum(1 for note in notes if note.kind is kind)
