"""
Unit tests for conversation and message persistence
"""

import pytest

from boardroom.middleware.error_handler import NotFoundError
from boardroom.models import SENDER_PERSONA, SENDER_USER
from boardroom.services.conversation_store import DEFAULT_TITLE, ConversationStore

from conftest import make_persona


class TestConversations:
    """Conversation lifecycle"""

    def test_blank_title_gets_default(self, db, user):
        conversation = ConversationStore(db).create_conversation(user.id, "   ")
        assert conversation.title == DEFAULT_TITLE

    def test_foreign_conversation_is_not_found(self, db, user, premium_user):
        store = ConversationStore(db)
        theirs = store.create_conversation(premium_user.id)
        with pytest.raises(NotFoundError):
            store.get_owned(user.id, theirs.id)

    def test_latest_is_created_on_first_use(self, db, user):
        store = ConversationStore(db)
        first = store.get_or_create_latest(user.id)
        assert store.get_or_create_latest(user.id).id == first.id

    def test_listing_orders_by_activity(self, db, user):
        store = ConversationStore(db)
        older = store.create_conversation(user.id, "Older")
        newer = store.create_conversation(user.id, "Newer")
        store.append_message(older.id, "bump")
        store.touch(older.id)

        conversations, total = store.list_conversations(user.id)
        assert total == 2
        assert [c.id for c in conversations] == [older.id, newer.id]


class TestMessages:
    """Append-only message log"""

    def test_user_messages_have_no_sender(self, db, user):
        store = ConversationStore(db)
        conversation = store.create_conversation(user.id)
        message = store.append_message(conversation.id, "hi", sender_type=SENDER_USER, sender_id=99)
        assert message.sender_id is None

    def test_persona_reply_is_text_with_sender(self, db, user):
        store = ConversationStore(db)
        conversation = store.create_conversation(user.id)
        persona = make_persona(db, user, "Sage")
        reply = store.append_persona_reply(conversation.id, persona.id, "Hello", extra={"personality": "wise_mentor"})

        assert reply.sender_type == SENDER_PERSONA
        assert reply.sender_id == persona.id
        assert reply.message_type == "text"
        assert reply.extra == {"personality": "wise_mentor"}

    def test_messages_are_in_insertion_order(self, db, user):
        store = ConversationStore(db)
        conversation = store.create_conversation(user.id)
        for i in range(5):
            store.append_message(conversation.id, f"m{i}")

        assert [m.content for m in store.list_messages(conversation.id)] == ["m0", "m1", "m2", "m3", "m4"]

    def test_recent_messages_is_the_tail_oldest_first(self, db, user):
        store = ConversationStore(db)
        conversation = store.create_conversation(user.id)
        messages = [store.append_message(conversation.id, f"m{i}") for i in range(12)]

        assert [m.content for m in store.recent_messages(conversation.id, 3)] == ["m9", "m10", "m11"]
        window = store.recent_messages(conversation.id, 3, before_id=messages[-1].id)
        assert [m.content for m in window] == ["m8", "m9", "m10"]
        assert store.recent_messages(conversation.id, 0) == []
