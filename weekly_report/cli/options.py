"""Shared CLI option definitions for the weekly-report commands."""

import typer

SINCE_DAYS_OPTION = typer.Option(
    7, "--since-days", "-s", min=1, help="Number of days to look back for updates"
)

INPUT_OPTION = typer.Option(
    None,
    "--input",
    "-i",
    help="File with GitHub issue URLs, one per line (default: stdin)",
)

CONCURRENCY_OPTION = typer.Option(
    4, "--concurrency", "-c", min=1, help="Number of issues fetched concurrently"
)

NO_NOTES_OPTION = typer.Option(
    False, "--no-notes", help="Disable the notes section in the output"
)

VERBOSE_OPTION = typer.Option(
    False, "--verbose", "-v", help="Enable verbose progress output"
)

QUIET_OPTION = typer.Option(False, "--quiet", "-q", help="Suppress progress output")

SUMMARY_PROMPT_OPTION = typer.Option(
    "",
    "--summary-prompt",
    help="Custom system prompt for single-issue AI summaries (uses default if empty)",
)

NO_SENTIMENT_OPTION = typer.Option(
    False,
    "--no-sentiment",
    help="Skip checking reported status against the update content",
)
