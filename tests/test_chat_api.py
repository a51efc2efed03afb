"""
API tests for conversations and POST /chat/send
"""

from boardroom.integrations.claude import CompletionError
from boardroom.models import Message

from conftest import auth_headers


class TestConversationEndpoints:
    """Conversation listing and history"""

    def test_create_and_list(self, client, user):
        headers = auth_headers(user)
        created = client.post("/api/v1/conversations", json={"title": "Money"}, headers=headers)
        assert created.status_code == 201

        listed = client.get("/api/v1/conversations", headers=headers).json()
        assert listed["meta"]["total"] == 1
        assert listed["data"][0]["title"] == "Money"

    def test_latest_creates_on_first_use(self, client, user):
        headers = auth_headers(user)
        first = client.get("/api/v1/conversations/latest", headers=headers).json()
        second = client.get("/api/v1/conversations/latest", headers=headers).json()
        assert first["id"] == second["id"]

    def test_foreign_history_is_hidden(self, client, user, conversation):
        response = client.get(f"/api/v1/conversations/{conversation.id}/messages", headers=auth_headers(user))
        assert response.status_code == 404


class TestChatSend:
    """Collected fan-out over HTTP"""

    def test_send_returns_every_reply(self, client, premium_user, conversation, board):
        headers = auth_headers(premium_user)
        response = client.post(
            "/api/v1/chat/send",
            json={
                "conversationId": conversation.id,
                "content": "I got a job offer abroad",
                "personaIds": [board[2].id, board[0].id],
            },
            headers=headers,
        )
        assert response.status_code == 200

        data = response.json()
        assert data["userMessage"]["senderType"] == "user"
        assert data["userMessage"]["content"] == "I got a job offer abroad"
        assert [r["persona"]["name"] for r in data["personaResults"]] == ["Sage", "Maya"]
        assert data["personaResults"][0]["message"]["senderId"] == board[2].id
        assert data["personaResults"][0]["message"]["metadata"]["personality"] == "wise_mentor"
        assert data["failures"] == []

        history = client.get(f"/api/v1/conversations/{conversation.id}/messages", headers=headers).json()
        assert [m["senderType"] for m in history] == ["user", "persona", "persona"]

        tail = client.get(f"/api/v1/conversations/{conversation.id}/messages?limit=1", headers=headers).json()
        assert len(tail) == 1
        assert tail[0]["senderId"] == board[0].id

    def test_partial_failure_is_not_an_error(self, client, completion_client, premium_user, conversation, board):
        completion_client.scripts["Maya"] = CompletionError("overloaded")
        response = client.post(
            "/api/v1/chat/send",
            json={"conversationId": conversation.id, "content": "Hello", "personaIds": [board[0].id, board[1].id]},
            headers=auth_headers(premium_user),
        )
        assert response.status_code == 200
        data = response.json()
        assert [r["persona"]["name"] for r in data["personaResults"]] == ["Marcus"]
        assert data["failures"] == [{"personaId": board[0].id, "reason": "overloaded"}]

    def test_empty_persona_ids_rejected(self, client, db, premium_user, conversation):
        response = client.post(
            "/api/v1/chat/send",
            json={"conversationId": conversation.id, "content": "Hello", "personaIds": []},
            headers=auth_headers(premium_user),
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "personaIds"
        db.expire_all()
        assert db.query(Message).count() == 0

    def test_unknown_persona_lists_missing_ids(self, client, premium_user, conversation, board):
        response = client.post(
            "/api/v1/chat/send",
            json={"conversationId": conversation.id, "content": "Hello", "personaIds": [board[0].id, 4242]},
            headers=auth_headers(premium_user),
        )
        assert response.status_code == 422
        assert response.json()["error"]["details"]["missing"] == [4242]

    def test_unsupported_message_type(self, client, premium_user, conversation, board):
        response = client.post(
            "/api/v1/chat/send",
            json={
                "conversationId": conversation.id,
                "content": "Hello",
                "personaIds": [board[0].id],
                "messageType": "video",
            },
            headers=auth_headers(premium_user),
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_audio_message_with_attachment(self, client, completion_client, premium_user, conversation, board):
        response = client.post(
            "/api/v1/chat/send",
            json={
                "conversationId": conversation.id,
                "personaIds": [board[1].id],
                "messageType": "audio",
                "attachment": {"url": "/uploads/audio/a.mp3", "mimeType": "audio/mpeg", "size": 2048},
            },
            headers=auth_headers(premium_user),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["userMessage"]["messageType"] == "audio"
        assert data["userMessage"]["metadata"]["url"] == "/uploads/audio/a.mp3"
        assert data["personaResults"][0]["message"]["messageType"] == "text"
        assert completion_client.requests[0].message_type == "audio"
