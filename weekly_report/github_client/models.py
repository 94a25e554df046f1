"""Pydantic models for GitHub data used by the report pipeline.

These models map to the parts of GitHub's REST API v3 responses that the
report needs.
API Reference: https://docs.github.com/en/rest/issues
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class IssueRef(BaseModel):
    """Reference to a single GitHub issue.

    Two references are equal when their canonical URLs are equal, regardless
    of how they were produced (URL list or project board).
    """

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Owner (user or organization) login")
    repo: str = Field(..., description="Repository name")
    number: int = Field(..., description="Issue number within the repository")
    url: str = Field(
        ..., description="Canonical issue URL without query string or fragment"
    )

    @classmethod
    def from_parts(cls, owner: str, repo: str, number: int) -> "IssueRef":
        """Build a reference with its canonical URL."""
        return cls(
            owner=owner,
            repo=repo,
            number=number,
            url=f"https://github.com/{owner}/{repo}/issues/{number}",
        )

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}#{self.number}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IssueRef):
            return NotImplemented
        return self.url == other.url

    def __hash__(self) -> int:
        return hash(self.url)


class Comment(BaseModel):
    """GitHub issue comment.

    Maps to GitHub REST API Issue Comment object.
    API Reference: https://docs.github.com/en/rest/issues/comments
    """

    model_config = ConfigDict(frozen=True)

    body: str = Field("", description="Markdown text of the comment")
    author: str = Field("", description="Login of the comment author")
    created_at: datetime = Field(..., description="Creation timestamp (ISO 8601)")
    url: str = Field("", description="HTML URL of the comment")


class IssueData(BaseModel):
    """Issue metadata needed to build a report row.

    Maps to a subset of the GitHub REST API Issue object.
    API Reference: https://docs.github.com/en/rest/issues/issues
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="HTML URL of the issue")
    title: str = Field(..., description="Issue title")
    state: str = Field("open", description="Current state: 'open' or 'closed'")
    labels: list[str] = Field(default_factory=list, description="Label names")
    assignees: list[str] = Field(
        default_factory=list, description="Logins of assigned users"
    )
    closed_at: datetime | None = Field(
        None, description="When the issue was closed (None while open)"
    )
    close_reason: str = Field(
        "", description="Text of the closing comment, if one could be found"
    )

    @property
    def is_closed(self) -> bool:
        return self.state == "closed"
