"""Runtime configuration loaded from the environment and CLI options."""

import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .ai.github_models import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_TIMEOUT
from .errors import ConfigError

DEFAULT_PROJECT_FIELD = "Status"
DEFAULT_PROJECT_MAX_ITEMS = 100


class ResolverConfig(BaseModel):
    """Where issue references come from.

    Shared by the input resolver and any project item source.
    """

    model_config = ConfigDict(frozen=True)

    project_url: str = Field("", description="Project board URL, empty for none")
    project_field_name: str = Field(
        DEFAULT_PROJECT_FIELD, description="Project field to filter items by"
    )
    project_field_values: list[str] = Field(
        default_factory=list, description="Accepted values of the project field"
    )
    project_include_prs: bool = Field(
        False, description="Include pull requests from the project board"
    )
    project_max_items: int = Field(
        DEFAULT_PROJECT_MAX_ITEMS, description="Maximum project items to fetch"
    )
    project_view: str = Field("", description="Project view name to filter by")
    project_view_id: str = Field(
        "", description="Project view ID, takes precedence over the view name"
    )
    url_list_path: str = Field("", description="File with issue URLs, one per line")
    use_stdin: bool = Field(False, description="Read issue URLs from stdin")


class Settings(BaseModel):
    """Settings for one report run."""

    model_config = ConfigDict(frozen=True)

    github_token: str = Field(..., min_length=1, description="GitHub API token")
    since_days: int = Field(7, ge=1, description="Days to look back for updates")
    concurrency: int = Field(4, ge=1, description="Concurrent issue fetches")
    notes: bool = Field(True, description="Render the notes section")
    verbose: bool = Field(False, description="Debug logging")
    quiet: bool = Field(False, description="Suppress progress logging")
    models_base_url: str = Field(DEFAULT_BASE_URL, description="GitHub Models URL")
    models_model: str = Field(DEFAULT_MODEL, description="GitHub Models model name")
    ai_enabled: bool = Field(True, description="Summarize updates with AI")
    ai_timeout: float = Field(
        DEFAULT_TIMEOUT, gt=0, description="AI request timeout in seconds"
    )
    summary_prompt: str = Field("", description="Custom single-item AI prompt")
    sentiment: bool = Field(True, description="Ask AI to check reported status")

    @classmethod
    def from_env(
        cls,
        env: Mapping[str, str] | None = None,
        *,
        since_days: int = 7,
        concurrency: int = 4,
        no_notes: bool = False,
        verbose: bool = False,
        quiet: bool = False,
        summary_prompt: str = "",
        no_sentiment: bool = False,
    ) -> "Settings":
        """Build settings from environment variables and CLI options.

        When ``env`` is None, a ``.env`` file in the working directory is
        loaded first (if present) and ``os.environ`` is used.

        Raises:
            ConfigError: If GITHUB_TOKEN is missing or a value is invalid
        """
        if env is None:
            load_dotenv()
            env = os.environ

        token = env.get("GITHUB_TOKEN", "")
        if not token:
            raise ConfigError("GITHUB_TOKEN environment variable is required")

        ai_timeout = DEFAULT_TIMEOUT
        raw_timeout = env.get("AI_TIMEOUT", "")
        if raw_timeout:
            try:
                seconds = int(raw_timeout)
            except ValueError:
                raise ConfigError("AI_TIMEOUT must be an integer (seconds)")
            if seconds > 0:
                ai_timeout = float(seconds)

        if since_days < 1:
            raise ConfigError(f"--since-days must be at least 1, got {since_days}")
        if concurrency < 1:
            raise ConfigError(f"--concurrency must be at least 1, got {concurrency}")

        ai_enabled = not env.get("DISABLE_SUMMARY", "")
        return cls(
            github_token=token,
            since_days=since_days,
            concurrency=concurrency,
            notes=not no_notes,
            verbose=verbose and not quiet,
            quiet=quiet,
            models_base_url=env.get("GITHUB_MODELS_BASE_URL") or DEFAULT_BASE_URL,
            models_model=env.get("GITHUB_MODELS_MODEL") or DEFAULT_MODEL,
            ai_enabled=ai_enabled,
            ai_timeout=ai_timeout,
            summary_prompt=summary_prompt,
            sentiment=ai_enabled and not no_sentiment,
        )
