"""System prompts for GitHub Models summarization."""

DEFAULT_SUMMARY_PROMPT = """Refine the content in the engineering status updates to be one
paragraph of roughly 3-5 sentences, present tense, third-person, markdown-ready,
no prefatory text. Keep relevant looking links intact in markdown format.
Attempt to not lose context when summarizing."""

_BATCH_PROMPT_HEADER = """You are summarizing multiple engineering status updates in a single batch.

You will receive a JSON object with an array of items, each containing:
- id: A unique identifier (the issue URL)
- issue: The issue title
- updates: One or more status updates (newest first)
- reported_status: The status the issue owner reported (e.g. "On Track")

Respond with ONLY a valid JSON object where:
- Keys are the item IDs (URLs) as strings
- Values are objects with a "summary" field and a "sentiment" field
- "summary" is 3-5 sentences, present tense, third-person, markdown-ready

Keep relevant markdown links intact. Do not add any prefatory text, explanation, or markdown code fences.
"""

_SENTIMENT_INSTRUCTIONS = """
Also compare each item's reported_status with the substance of its updates.
If they clearly disagree (for example the status is "On Track" but the updates
describe a blocking dependency), set "sentiment" to an object with:
- "status": one of "on_track", "at_risk", "off_track", "not_started", "done"
- "explanation": one short sentence explaining the mismatch
Otherwise set "sentiment" to null.

Example response format:
{
  "https://github.com/org/repo/issues/1": {
    "summary": "Team completed OAuth integration...",
    "sentiment": null
  },
  "https://github.com/org/repo/issues/2": {
    "summary": "Team is waiting on an upstream fix...",
    "sentiment": {"status": "at_risk", "explanation": "Updates describe an unresolved blocker."}
  }
}"""

_NO_SENTIMENT_INSTRUCTIONS = """
Always set "sentiment" to null.

Example response format:
{
  "https://github.com/org/repo/issues/1": {
    "summary": "Team completed OAuth integration...",
    "sentiment": null
  },
  "https://github.com/org/repo/issues/2": {
    "summary": "Team fixed critical race condition...",
    "sentiment": null
  }
}"""

BATCH_SUMMARY_PROMPT = _BATCH_PROMPT_HEADER + _SENTIMENT_INSTRUCTIONS
BATCH_SUMMARY_PROMPT_NO_SENTIMENT = _BATCH_PROMPT_HEADER + _NO_SENTIMENT_INSTRUCTIONS


def batch_system_prompt(sentiment: bool) -> str:
    """Return the batch-mode system prompt, with or without sentiment checks."""
    return BATCH_SUMMARY_PROMPT if sentiment else BATCH_SUMMARY_PROMPT_NO_SENTIMENT
