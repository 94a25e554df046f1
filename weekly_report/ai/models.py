"""Pydantic models for batch summarization requests and results."""

from pydantic import BaseModel, ConfigDict, Field


class BatchItem(BaseModel):
    """One issue's worth of updates submitted in a batch request."""

    model_config = ConfigDict(frozen=True)

    issue_url: str = Field(description="Issue URL, the unique key in the response")
    issue_title: str = Field("", description="Issue title for context")
    update_texts: list[str] = Field(
        default_factory=list, description="Update texts, newest first"
    )
    reported_status: str = Field(
        "", description="Status caption reported by the issue owner"
    )


class SentimentAssessment(BaseModel):
    """A mismatch between the reported status and the substance of updates."""

    model_config = ConfigDict(frozen=True)

    suggested_status: str = Field(
        description="Canonical status key suggested by the model (e.g. 'at_risk')"
    )
    explanation: str = Field(description="Why the reported status looks wrong")


class BatchResult(BaseModel):
    """Summarization result for one issue."""

    model_config = ConfigDict(frozen=True)

    summary: str = Field(description="Generated summary text")
    sentiment: SentimentAssessment | None = Field(
        None, description="Present only when a status mismatch was detected"
    )


class ChatMessage(BaseModel):
    """One message of an OpenAI-compatible chat completion request."""

    model_config = ConfigDict(frozen=True)

    role: str
    content: str


class ChatRequest(BaseModel):
    """Immutable chat completion request carrying its own system prompt."""

    model_config = ConfigDict(frozen=True)

    model: str
    messages: list[ChatMessage]
    temperature: float = 1.0

    @classmethod
    def build(
        cls, model: str, system_prompt: str, user_prompt: str, temperature: float
    ) -> "ChatRequest":
        return cls(
            model=model,
            temperature=temperature,
            messages=[
                ChatMessage(role="system", content=system_prompt),
                ChatMessage(role="user", content=user_prompt),
            ],
        )
