"""Conversation and message persistence.

The message log is append-only; ordering within a conversation is
(created_at, id). No per-conversation lock is taken: concurrent submissions
to one conversation interleave in arrival order at the database.
"""

from typing import Any, Optional

import structlog
from sqlalchemy.orm import Session

from boardroom.middleware.error_handler import NotFoundError
from boardroom.models import Conversation, Message, SENDER_USER, SENDER_PERSONA
from boardroom.models.base import utcnow

logger = structlog.get_logger()

DEFAULT_TITLE = "New conversation"


class ConversationStore:
    """Reads and appends for conversations owned by a user."""

    def __init__(self, db: Session):
        self.db = db

    # Conversations

    def list_conversations(self, owner_id: int, page: int = 1, per_page: int = 50) -> tuple[list[Conversation], int]:
        """Conversations ordered by most recent activity, with the total count."""
        query = self.db.query(Conversation).filter(Conversation.owner_id == owner_id)
        total = query.count()
        conversations = (
            query.order_by(Conversation.last_activity_at.desc(), Conversation.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return conversations, total

    def create_conversation(self, owner_id: int, title: Optional[str] = None) -> Conversation:
        now = utcnow()
        conversation = Conversation(
            owner_id=owner_id,
            title=(title or "").strip() or DEFAULT_TITLE,
            created_at=now,
            last_activity_at=now,
        )
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)

        logger.info("Conversation created", id=conversation.id, owner_id=owner_id)
        return conversation

    def get_owned(self, owner_id: int, conversation_id: int) -> Conversation:
        """Conversation owned by the user; foreign ones look missing."""
        conversation = (
            self.db.query(Conversation)
            .filter(Conversation.id == conversation_id, Conversation.owner_id == owner_id)
            .first()
        )
        if not conversation:
            raise NotFoundError("Conversation", conversation_id)
        return conversation

    def get_or_create_latest(self, owner_id: int) -> Conversation:
        """Most recently active conversation, created on first use."""
        conversation = (
            self.db.query(Conversation)
            .filter(Conversation.owner_id == owner_id)
            .order_by(Conversation.last_activity_at.desc(), Conversation.id.desc())
            .first()
        )
        return conversation or self.create_conversation(owner_id)

    def touch(self, conversation_id: int) -> None:
        """Bump last_activity_at; single-row update."""
        self.db.query(Conversation).filter(Conversation.id == conversation_id).update(
            {Conversation.last_activity_at: utcnow()},
            synchronize_session=False,
        )
        self.db.commit()

    # Messages

    def append_message(
        self,
        conversation_id: int,
        content: str,
        sender_type: str = SENDER_USER,
        sender_id: Optional[int] = None,
        message_type: str = "text",
        extra: Optional[dict[str, Any]] = None,
    ) -> Message:
        """Insert one immutable message and return it."""
        if sender_type == SENDER_USER:
            sender_id = None

        message = Message(
            conversation_id=conversation_id,
            sender_type=sender_type,
            sender_id=sender_id,
            content=content,
            message_type=message_type,
            created_at=utcnow(),
        )
        message.extra = extra
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def append_persona_reply(
        self,
        conversation_id: int,
        persona_id: int,
        content: str,
        extra: Optional[dict[str, Any]] = None,
    ) -> Message:
        return self.append_message(
            conversation_id,
            content,
            sender_type=SENDER_PERSONA,
            sender_id=persona_id,
            message_type="text",
            extra=extra,
        )

    def list_messages(self, conversation_id: int) -> list[Message]:
        """Full log, oldest first."""
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at, Message.id)
            .all()
        )

    def recent_messages(
        self,
        conversation_id: int,
        limit: int,
        before_id: Optional[int] = None,
    ) -> list[Message]:
        """Last `limit` messages, oldest first.

        `before_id` excludes that message and anything newer, so the window can
        be taken relative to a just-written message.
        """
        if limit <= 0:
            return []

        query = self.db.query(Message).filter(Message.conversation_id == conversation_id)
        if before_id is not None:
            query = query.filter(Message.id < before_id)

        tail = (
            query.order_by(Message.created_at.desc(), Message.id.desc())
            .limit(limit)
            .all()
        )
        return list(reversed(tail))
