"""Persona fan-out for chat messages.

One inbound user message is persisted, then every selected persona
generates its reply independently: a failed or slow persona never blocks
the others, and never fails the submission as a whole.

Two delivery styles share this module:
- submit_message: run the whole fan-out and return every result at once
- accept + stream_replies: report per-persona lifecycle to an EventSink as
  each persona progresses
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, Sequence

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from boardroom.config.settings import settings
from boardroom.integrations.claude import (
    CompletionClient,
    CompletionError,
    CompletionRequest,
    CompletionResult,
    HistoryTurn,
)
from boardroom.middleware.error_handler import ValidationAPIError
from boardroom.models import Conversation, Message, Persona, MESSAGE_TYPES, SENDER_USER
from boardroom.services import persona_service
from boardroom.services.conversation_store import ConversationStore

logger = structlog.get_logger()

MEDIA_TYPES = ("image", "audio")


class ChatValidationError(ValidationAPIError):
    """Submission rejected before anything was persisted."""

    def __init__(self, message: str, field: Optional[str] = None, **details: Any):
        super().__init__(message, field=field)
        self.details.update(details)


@dataclass
class PersonaReply:
    message: Message
    persona: Persona


@dataclass
class PersonaFailure:
    persona_id: int
    reason: str


@dataclass
class ChatResult:
    user_message: Message
    results: list[PersonaReply] = field(default_factory=list)
    failures: list[PersonaFailure] = field(default_factory=list)


@dataclass
class AcceptedMessage:
    """A persisted user message plus everything needed to fan it out."""

    conversation: Conversation
    user_message: Message
    personas: list[Persona]
    history: list[HistoryTurn]
    content: str
    message_type: str


class EventSink(Protocol):
    """Receives per-persona lifecycle events from stream_replies."""

    async def persona_typing(self, persona: Persona) -> None: ...

    async def persona_reply(self, message: Message, persona: Persona) -> None: ...

    async def persona_failed(self, persona: Persona, reason: str) -> None: ...

    async def persona_stop_typing(self, persona: Persona) -> None: ...


def random_typing_delay() -> float:
    """Stagger before a persona starts 'typing', so replies don't land at once."""
    low = max(0.0, settings.TYPING_DELAY_MIN_SECONDS)
    high = max(low, settings.TYPING_DELAY_MAX_SECONDS)
    return random.uniform(low, high)


def attachment_metadata(attachment: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Keep the attachment fields that were actually supplied."""
    if not attachment:
        return {}
    return {key: value for key, value in attachment.items() if value is not None}


class ChatOrchestrator:
    """Fans one user message out to the selected personas."""

    def __init__(
        self,
        db: Session,
        completion_client: CompletionClient,
        history_window: Optional[int] = None,
        timeout: Optional[float] = None,
        concurrency: Optional[int] = None,
        typing_delay: Callable[[], float] = random_typing_delay,
    ):
        self.db = db
        self.store = ConversationStore(db)
        self.completion_client = completion_client
        self.history_window = settings.HISTORY_WINDOW if history_window is None else history_window
        self.timeout = settings.COMPLETION_TIMEOUT_SECONDS if timeout is None else timeout
        self.semaphore = asyncio.Semaphore(max(1, concurrency or settings.FAN_OUT_CONCURRENCY))
        self.typing_delay = typing_delay

    # Validation and step 1-2

    def _validate(
        self,
        owner_id: int,
        conversation_id: int,
        content: str,
        message_type: str,
        persona_ids: Sequence[int],
        attachment: dict[str, Any],
    ) -> tuple[Conversation, list[Persona]]:
        if message_type not in MESSAGE_TYPES:
            raise ChatValidationError(
                f"Unsupported message type '{message_type}'",
                field="messageType",
            )

        if not persona_ids:
            raise ChatValidationError(
                "Select at least one board member to reply",
                field="personaIds",
            )

        if message_type == "text" and not content:
            raise ChatValidationError("Message content is required", field="content")

        if message_type in MEDIA_TYPES and not attachment.get("url"):
            raise ChatValidationError(
                f"An {message_type} message needs an uploaded attachment",
                field="attachment",
            )

        conversation = self.store.get_owned(owner_id, conversation_id)

        # Caller order is kept; repeated ids only reply once
        ordered_ids = list(dict.fromkeys(persona_ids))
        found = persona_service.get_active_by_ids(self.db, owner_id, ordered_ids)
        missing = [pid for pid in ordered_ids if pid not in found]
        if missing:
            raise ChatValidationError(
                "Some board members are unknown or inactive",
                field="personaIds",
                missing=missing,
            )

        return conversation, [found[pid] for pid in ordered_ids]

    def accept(
        self,
        owner_id: int,
        conversation_id: int,
        content: str,
        message_type: str,
        persona_ids: Sequence[int],
        attachment: Optional[dict[str, Any]] = None,
    ) -> AcceptedMessage:
        """Validate, persist the user message and touch the conversation.

        Nothing is written if validation fails. A failed user-message write
        propagates: no persona can run without it.
        """
        content = (content or "").strip()
        extra = attachment_metadata(attachment)

        conversation, personas = self._validate(
            owner_id, conversation_id, content, message_type, persona_ids, extra
        )

        user_message = self.store.append_message(
            conversation.id,
            content,
            sender_type=SENDER_USER,
            message_type=message_type,
            extra=extra,
        )
        self.store.touch(conversation.id)

        logger.info(
            "User message accepted",
            conversation_id=conversation.id,
            message_id=user_message.id,
            message_type=message_type,
            persona_count=len(personas),
        )

        return AcceptedMessage(
            conversation=conversation,
            user_message=user_message,
            personas=personas,
            history=self._history(conversation.id, user_message.id),
            content=content,
            message_type=message_type,
        )

    def _history(self, conversation_id: int, before_id: int) -> list[HistoryTurn]:
        turns = []
        for message in self.store.recent_messages(conversation_id, self.history_window, before_id=before_id):
            is_user = message.sender_type == SENDER_USER
            turns.append(
                HistoryTurn(
                    role="user" if is_user else "assistant",
                    content=message.content,
                    speaker=None if is_user or message.sender is None else message.sender.name,
                    message_type=message.message_type,
                )
            )
        return turns

    # Step 3

    async def _generate(self, persona: Persona, accepted: AcceptedMessage) -> CompletionResult | PersonaFailure:
        """Run one persona's completion; failures come back as values."""
        request = CompletionRequest(
            system_prompt=persona.system_prompt,
            persona_name=persona.name,
            personality=persona.personality,
            history=accepted.history,
            new_message=accepted.content,
            message_type=accepted.message_type,
        )
        log = logger.bind(conversation_id=accepted.conversation.id, persona_id=persona.id)

        try:
            async with self.semaphore:
                return await asyncio.wait_for(
                    self.completion_client.complete(request),
                    timeout=self.timeout,
                )
        except asyncio.TimeoutError:
            log.warning("Persona reply timed out", timeout=self.timeout)
            return PersonaFailure(persona.id, "timeout")
        except CompletionError as e:
            log.warning("Persona reply failed", error=str(e))
            return PersonaFailure(persona.id, str(e))
        except Exception as e:
            # Any upstream failure is contained to this persona
            log.exception("Unexpected error generating persona reply", error=str(e))
            return PersonaFailure(persona.id, "unexpected error")

    def _persist_reply(
        self,
        persona: Persona,
        accepted: AcceptedMessage,
        result: CompletionResult,
    ) -> Message | PersonaFailure:
        extra = {"personality": persona.personality}
        if result.suggestions:
            extra["followUpQuestions"] = result.suggestions

        try:
            message = self.store.append_persona_reply(
                accepted.conversation.id,
                persona.id,
                result.text,
                extra=extra,
            )
            self.store.touch(accepted.conversation.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                "Failed to save persona reply",
                conversation_id=accepted.conversation.id,
                persona_id=persona.id,
                error=str(e),
            )
            return PersonaFailure(persona.id, "storage error")
        return message

    async def submit_message(
        self,
        owner_id: int,
        conversation_id: int,
        content: str,
        message_type: str,
        persona_ids: Sequence[int],
        attachment: Optional[dict[str, Any]] = None,
    ) -> ChatResult:
        """Accept a message and collect every persona's reply.

        Generations run concurrently (bounded by the fan-out semaphore);
        replies are persisted in the requested persona order. Personas that
        fail are listed in `failures` and skipped in `results`.
        """
        accepted = self.accept(owner_id, conversation_id, content, message_type, persona_ids, attachment)
        outcomes = await asyncio.gather(*(self._generate(p, accepted) for p in accepted.personas))

        chat_result = ChatResult(user_message=accepted.user_message)
        for persona, outcome in zip(accepted.personas, outcomes):
            if isinstance(outcome, PersonaFailure):
                chat_result.failures.append(outcome)
                continue

            saved = self._persist_reply(persona, accepted, outcome)
            if isinstance(saved, PersonaFailure):
                chat_result.failures.append(saved)
            else:
                chat_result.results.append(PersonaReply(message=saved, persona=persona))

        logger.info(
            "Fan-out complete",
            conversation_id=accepted.conversation.id,
            replies=len(chat_result.results),
            failures=len(chat_result.failures),
        )
        return chat_result

    async def stream_replies(self, accepted: AcceptedMessage, sink: EventSink) -> ChatResult:
        """Run every persona as its own task, reporting progress to `sink`.

        Replies are persisted in completion order. For each persona the sink
        sees typing, then reply (or failure), then stop_typing.
        """
        chat_result = ChatResult(user_message=accepted.user_message)

        async def run(persona: Persona) -> None:
            await asyncio.sleep(self.typing_delay())
            await sink.persona_typing(persona)

            outcome = await self._generate(persona, accepted)
            if not isinstance(outcome, PersonaFailure):
                outcome = self._persist_reply(persona, accepted, outcome)

            if isinstance(outcome, PersonaFailure):
                chat_result.failures.append(outcome)
                await sink.persona_failed(persona, outcome.reason)
            else:
                chat_result.results.append(PersonaReply(message=outcome, persona=persona))
                await sink.persona_reply(outcome, persona)

            await sink.persona_stop_typing(persona)

        await asyncio.gather(*(run(p) for p in accepted.personas))

        logger.info(
            "Streamed fan-out complete",
            conversation_id=accepted.conversation.id,
            replies=len(chat_result.results),
            failures=len(chat_result.failures),
        )
        return chat_result
