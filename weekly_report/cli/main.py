"""Main CLI entry point."""

import typer
from dotenv import load_dotenv
from rich.console import Console

from .generate import generate

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="weekly-report",
    help="Generate weekly status reports from GitHub issue updates",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


app.command(name="generate", context_settings={"help_option_names": ["-h", "--help"]})(
    generate
)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from weekly_report import __version__

    console.print(f"weekly-report v{__version__}")


if __name__ == "__main__":
    app()
