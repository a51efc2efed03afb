"""
Tests for the streaming chat channel
"""

from boardroom.endpoints.chat_websocket import handle_chat_message
from boardroom.integrations.claude import CompletionError
from boardroom.services.chat import ChatOrchestrator
from boardroom.services.token import create_user_token


def ws_url(user) -> str:
    return f"/api/v1/ws?token={create_user_token(user.id, user.email)}"


def collect_persona_events(websocket, persona_count: int) -> list[dict]:
    """Read events until every persona has stopped typing."""
    events = []
    stopped = 0
    while stopped < persona_count:
        event = websocket.receive_json()
        events.append(event)
        if event["type"] == "persona_stop_typing":
            stopped += 1
    return events


class TestChatWebSocket:
    """chat_message lifecycle"""

    def test_connection_established(self, client, premium_user):
        with client.websocket_connect(ws_url(premium_user)) as websocket:
            assert websocket.receive_json()["type"] == "connection_established"

    def test_persona_lifecycle_events(self, client, completion_client, premium_user, conversation, board):
        completion_client.scripts["Marcus"] = CompletionError("rate limited")

        with client.websocket_connect(ws_url(premium_user)) as websocket:
            websocket.receive_json()
            websocket.send_json({
                "type": "chat_message",
                "conversationId": conversation.id,
                "content": "Big decision today",
                "personaIds": [b.id for b in board],
            })

            sent = websocket.receive_json()
            assert sent["type"] == "message_sent"
            assert sent["message"]["content"] == "Big decision today"

            events = collect_persona_events(websocket, len(board))

        for persona in board:
            mine = [e for e in events if e.get("personaId", e.get("persona", {}).get("id")) == persona.id]
            expected = "persona_error" if persona.name == "Marcus" else "persona_reply"
            assert [e["type"] for e in mine] == ["persona_typing", expected, "persona_stop_typing"]

        replies = [e for e in events if e["type"] == "persona_reply"]
        assert sorted(e["persona"]["name"] for e in replies) == ["Maya", "Sage"]
        assert all(e["message"]["senderType"] == "persona" for e in replies)
        error = next(e for e in events if e["type"] == "persona_error")
        assert error["error"] == "rate limited"

        headers = {"Authorization": f"Bearer {create_user_token(premium_user.id, premium_user.email)}"}
        history = client.get(f"/api/v1/conversations/{conversation.id}/messages", headers=headers).json()
        assert [m["senderType"] for m in history].count("persona") == 2

    def test_user_id_in_event_without_token(self, client, premium_user, conversation, board):
        with client.websocket_connect("/api/v1/ws") as websocket:
            websocket.receive_json()
            websocket.send_json({
                "type": "chat_message",
                "conversationId": conversation.id,
                "content": "Hi",
                "userId": premium_user.id,
                "personaIds": [board[0].id],
            })
            assert websocket.receive_json()["type"] == "message_sent"
            events = collect_persona_events(websocket, 1)
        assert [e["type"] for e in events] == ["persona_typing", "persona_reply", "persona_stop_typing"]

    def test_invalid_submission_reports_error(self, client, premium_user, conversation):
        with client.websocket_connect(ws_url(premium_user)) as websocket:
            websocket.receive_json()
            websocket.send_json({
                "type": "chat_message",
                "conversationId": conversation.id,
                "content": "Hi",
                "personaIds": [],
            })
            event = websocket.receive_json()
            assert event["type"] == "error"
            assert "board member" in event["error"]

    def test_malformed_events_keep_connection_open(self, client, premium_user):
        with client.websocket_connect(ws_url(premium_user)) as websocket:
            websocket.receive_json()

            websocket.send_text("{not json")
            assert websocket.receive_json() == {"type": "error", "error": "Invalid JSON"}

            websocket.send_json({"type": "dance"})
            assert websocket.receive_json()["type"] == "error"

            websocket.send_json({"type": "chat_message"})
            assert websocket.receive_json()["type"] == "error"

            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

    def test_binary_frames_are_accepted(self, client, premium_user):
        with client.websocket_connect(ws_url(premium_user)) as websocket:
            websocket.receive_json()

            websocket.send_bytes(b'{"type": "ping"}')
            assert websocket.receive_json() == {"type": "pong"}

            websocket.send_bytes(b"not json at all")
            assert websocket.receive_json() == {"type": "error", "error": "Invalid JSON"}

            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}


class RecordingConnection:
    """Stands in for ChatConnection; keeps every event sent."""

    id = "test"

    def __init__(self):
        self.events = []

    async def send(self, event: dict) -> bool:
        self.events.append(event)
        return True

    async def send_error(self, error: str) -> bool:
        return await self.send({"type": "error", "error": error})


class TestHandleChatMessage:
    """Background chat_message task"""

    async def test_unexpected_error_is_reported_to_client(
        self, premium_user, conversation, board, completion_client, monkeypatch
    ):
        async def crash(self, accepted, sink):
            raise RuntimeError("sink exploded")

        monkeypatch.setattr(ChatOrchestrator, "stream_replies", crash)
        connection = RecordingConnection()

        await handle_chat_message(
            connection,
            {
                "type": "chat_message",
                "conversationId": conversation.id,
                "content": "Hi",
                "personaIds": [board[0].id],
            },
            premium_user.id,
            completion_client,
        )

        assert [e["type"] for e in connection.events] == ["message_sent", "error"]
        assert connection.events[-1]["error"] == "Failed to process message"
