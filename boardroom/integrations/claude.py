"""Claude completion client for persona replies."""

import json
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

import structlog
from anthropic import AsyncAnthropic, APIError

from boardroom.config.settings import settings

logger = structlog.get_logger()

MEDIA_PREFIXES = {
    "image": "[User shared an image]",
    "audio": "[User shared an audio message]",
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

REPLY_INSTRUCTIONS = """CRITICAL INSTRUCTIONS FOR ENGAGING CONVERSATIONS:
- You are {name}, an AI board member with a {personality} personality
- Always respond in character, providing advice/support according to your personality
- Other board members may also reply in this conversation; their messages are labelled with their names
- Be conversational, empathetic, and genuinely curious about the user's life
- Keep responses conversational (2-4 sentences) but meaningful
- When the user shares an image or audio message, ask about the story or feelings behind it

Respond with JSON only, in this exact format:
{{"content": "your reply", "followUpQuestions": ["question 1", "question 2"]}}
Include 1-2 follow-up questions when they help the user reflect further."""


class CompletionError(Exception):
    """Raised when a completion cannot be produced (API failure, empty output)."""

    pass


@dataclass
class HistoryTurn:
    """One prior message, as seen by a persona."""

    role: str  # "user" or "assistant"
    content: str
    speaker: Optional[str] = None  # persona name for assistant turns
    message_type: str = "text"


@dataclass
class CompletionRequest:
    system_prompt: str
    persona_name: str
    personality: str
    history: list[HistoryTurn]
    new_message: str
    message_type: str = "text"


@dataclass
class CompletionResult:
    text: str
    suggestions: list[str] = field(default_factory=list)


class CompletionClient(Protocol):
    """Anything that can turn a CompletionRequest into a CompletionResult."""

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        ...


def describe_media(content: str, message_type: str) -> str:
    """Prefix media messages so the model knows an attachment was shared."""
    prefix = MEDIA_PREFIXES.get(message_type)
    if not prefix:
        return content
    return f"{prefix} {content}".strip()


def build_messages(request: CompletionRequest) -> list[dict]:
    """Convert history plus the new message into Messages API turns.

    Consecutive turns with the same role are merged and the list always
    starts with a user turn.
    """
    turns: list[dict] = []

    def push(role: str, content: str) -> None:
        if not content:
            return
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] = f"{turns[-1]['content']}\n\n{content}"
        else:
            turns.append({"role": role, "content": content})

    for turn in request.history:
        content = describe_media(turn.content, turn.message_type)
        if turn.role == "assistant":
            if turn.speaker and turn.speaker != request.persona_name:
                content = f"[{turn.speaker}] {content}"
            push("assistant", content)
        else:
            push("user", content)

    push("user", describe_media(request.new_message, request.message_type))

    while turns and turns[0]["role"] != "user":
        turns.pop(0)
    return turns


def parse_reply(raw: str) -> CompletionResult:
    """Parse the model output, accepting JSON, fenced JSON or plain text.

    Raises:
        CompletionError: output is empty
    """
    text = (raw or "").strip()
    match = _FENCE_RE.match(text)
    if match:
        text = match.group(1).strip()

    content = text
    suggestions: list[str] = []

    if text.startswith("{"):
        try:
            data = json.loads(text)
        except ValueError:
            data = None
        if isinstance(data, dict):
            content = str(data.get("content") or "").strip()
            questions = data.get("followUpQuestions") or []
            if isinstance(questions, list):
                suggestions = [str(q).strip() for q in questions if str(q).strip()]

    if not content:
        raise CompletionError("Model returned an empty reply")
    return CompletionResult(text=content, suggestions=suggestions)


class ClaudeCompletionClient:
    """Claude AI client for persona reply generation."""

    def __init__(self, client: Optional[AsyncAnthropic] = None):
        """Initialize Claude client with async support."""
        self.client = client or AsyncAnthropic(api_key=settings.ANTHROPIC_API_KEY)
        self.model = settings.CLAUDE_MODEL
        self.max_tokens = settings.CLAUDE_MAX_TOKENS
        self.temperature = settings.CLAUDE_TEMPERATURE

    def build_system_prompt(self, request: CompletionRequest) -> str:
        instructions = REPLY_INSTRUCTIONS.format(
            name=request.persona_name,
            personality=request.personality.replace("_", " "),
        )
        return f"{request.system_prompt}\n\n{instructions}"

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Generate one persona reply.

        Raises:
            CompletionError: API failure or unusable output
        """
        logger.debug("Generating persona reply", persona=request.persona_name)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=self.build_system_prompt(request),
                messages=build_messages(request),
            )
        except APIError as e:
            logger.error("Claude API error", persona=request.persona_name, error=str(e))
            raise CompletionError(f"Reply generation failed: {e}") from e

        raw = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        return parse_reply(raw)


_client: Optional[ClaudeCompletionClient] = None


def get_completion_client() -> CompletionClient:
    """FastAPI dependency returning the shared completion client."""
    global _client
    if _client is None:
        _client = ClaudeCompletionClient()
    return _client
