"""The ``generate`` command: build a markdown status report."""

import asyncio
import logging
import signal
import sys
from pathlib import Path

import typer
from rich.console import Console

from ..ai.github_models import GitHubModelsClient
from ..ai.summarizer import NoopSummarizer, Summarizer
from ..config import ResolverConfig, Settings
from ..errors import OperationCancelledError, WeeklyReportError
from ..github_client.client import GitHubClient
from ..github_client.models import IssueRef
from ..github_client.resolver import read_url_list, resolve_issue_refs
from ..pipeline import ReportOutcome, run_report
from ..transport.cancel import CancelToken
from ..utils.logging import setup_logging
from .options import (
    CONCURRENCY_OPTION,
    INPUT_OPTION,
    NO_NOTES_OPTION,
    NO_SENTIMENT_OPTION,
    QUIET_OPTION,
    SINCE_DAYS_OPTION,
    SUMMARY_PROMPT_OPTION,
    VERBOSE_OPTION,
)

logger = logging.getLogger(__name__)
console = Console(stderr=True)

# Exit code when there is nothing to report
EXIT_NO_DATA = 2
EXIT_CANCELLED = 130


def generate(
    since_days: int = SINCE_DAYS_OPTION,
    input_path: Path | None = INPUT_OPTION,
    concurrency: int = CONCURRENCY_OPTION,
    no_notes: bool = NO_NOTES_OPTION,
    verbose: bool = VERBOSE_OPTION,
    quiet: bool = QUIET_OPTION,
    summary_prompt: str = SUMMARY_PROMPT_OPTION,
    no_sentiment: bool = NO_SENTIMENT_OPTION,
) -> None:
    """Generate a weekly status report from GitHub issue comments.

    Reads GitHub issue URLs (one per line) from --input or stdin, collects
    structured status reports posted in the last --since-days days and writes
    a markdown table to stdout.

    \b
    Examples:
      weekly-report generate --input issues.txt
      cat issues.txt | weekly-report generate --since-days 14 --no-notes
    """
    try:
        settings = Settings.from_env(
            since_days=since_days,
            concurrency=concurrency,
            no_notes=no_notes,
            verbose=verbose,
            quiet=quiet,
            summary_prompt=summary_prompt,
            no_sentiment=no_sentiment,
        )
    except WeeklyReportError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    setup_logging(verbose=settings.verbose, quiet=settings.quiet)

    resolver_config = ResolverConfig(
        url_list_path=str(input_path) if input_path else "",
        use_stdin=input_path is None,
    )

    # Input is read before the event loop starts so Ctrl-C interrupts it directly
    try:
        url_refs = read_url_list(resolver_config, sys.stdin)
    except KeyboardInterrupt:
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)
    except (WeeklyReportError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    try:
        outcome = asyncio.run(_generate(settings, resolver_config, url_refs))
    except OperationCancelledError:
        console.print("[yellow]Cancelled[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)
    except (WeeklyReportError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if outcome is None:
        console.print("No valid GitHub issue URLs found")
        raise typer.Exit(EXIT_NO_DATA)

    if not outcome.rows:
        console.print("No report rows generated")
        raise typer.Exit(EXIT_NO_DATA)

    typer.echo(outcome.render(include_notes=settings.notes), nl=False)
    if outcome.cancelled:
        console.print(
            f"[yellow]Cancelled, partial report with {len(outcome.rows)} rows[/yellow]"
        )
        raise typer.Exit(EXIT_CANCELLED)

    logger.info(
        f"Report generated: {len(outcome.rows)} rows, {len(outcome.notes)} notes"
    )


def build_summarizer(settings: Settings) -> Summarizer:
    if not settings.ai_enabled:
        logger.debug("AI summarization disabled")
        return NoopSummarizer()

    logger.debug(f"AI summarization enabled with model {settings.models_model}")
    return GitHubModelsClient(
        token=settings.github_token,
        base_url=settings.models_base_url,
        model=settings.models_model,
        system_prompt=settings.summary_prompt,
        timeout=settings.ai_timeout,
        sentiment=settings.sentiment,
    )


def _install_interrupt_handler(cancel: CancelToken) -> bool:
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel.cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        return False
    return True


async def _generate(
    settings: Settings, resolver_config: ResolverConfig, url_refs: list[IssueRef]
) -> ReportOutcome | None:
    cancel = CancelToken()
    handler_installed = _install_interrupt_handler(cancel)
    try:
        logger.info("Resolving issue references...")
        refs = await resolve_issue_refs(
            resolver_config, None, cancel, url_refs=url_refs
        )
        if not refs:
            return None
        logger.info(f"Found {len(refs)} GitHub issues")

        summarizer = build_summarizer(settings)
        try:
            async with GitHubClient(token=settings.github_token) as github:
                return await run_report(
                    refs,
                    github,
                    summarizer,
                    since_days=settings.since_days,
                    concurrency=settings.concurrency,
                    cancel=cancel,
                )
        finally:
            if isinstance(summarizer, GitHubModelsClient):
                await summarizer.aclose()
    finally:
        if handler_installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)
