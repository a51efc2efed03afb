"""
Unit tests for the Claude completion client helpers
"""

from types import SimpleNamespace

import pytest

from boardroom.integrations.claude import (
    ClaudeCompletionClient,
    CompletionError,
    CompletionRequest,
    HistoryTurn,
    build_messages,
    parse_reply,
)


def request(history=None, new_message="What now?", message_type="text") -> CompletionRequest:
    return CompletionRequest(
        system_prompt="You are Sage.",
        persona_name="Sage",
        personality="wise_mentor",
        history=history or [],
        new_message=new_message,
        message_type=message_type,
    )


class TestParseReply:
    """Model output parsing"""

    def test_json_reply(self):
        result = parse_reply('{"content": "Breathe.", "followUpQuestions": ["Why now?", " "]}')
        assert result.text == "Breathe."
        assert result.suggestions == ["Why now?"]

    def test_fenced_json_reply(self):
        result = parse_reply('```json\n{"content": "Fenced"}\n```')
        assert result.text == "Fenced"
        assert result.suggestions == []

    def test_plain_text_reply(self):
        assert parse_reply("  Just text.  ").text == "Just text."

    def test_broken_json_is_kept_as_text(self):
        assert parse_reply('{"content": oops').text == '{"content": oops'

    def test_empty_reply_raises(self):
        with pytest.raises(CompletionError):
            parse_reply('{"content": ""}')
        with pytest.raises(CompletionError):
            parse_reply("   ")


class TestBuildMessages:
    """History conversion"""

    def test_other_personas_are_labelled(self):
        history = [
            HistoryTurn(role="user", content="Hi"),
            HistoryTurn(role="assistant", content="Hello!", speaker="Maya"),
            HistoryTurn(role="assistant", content="Welcome back.", speaker="Sage"),
        ]
        messages = build_messages(request(history))

        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[1]["content"] == "[Maya] Hello!\n\nWelcome back."
        assert messages[2]["content"] == "What now?"

    def test_leading_assistant_turns_dropped(self):
        history = [HistoryTurn(role="assistant", content="Earlier", speaker="Maya")]
        messages = build_messages(request(history))
        assert messages == [{"role": "user", "content": "What now?"}]

    def test_media_is_described(self):
        messages = build_messages(request(new_message="", message_type="image"))
        assert messages == [{"role": "user", "content": "[User shared an image]"}]


class FakeMessages:
    def __init__(self, text):
        self.text = text
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.text)])


class TestClaudeCompletionClient:
    """Client wiring"""

    async def test_complete_sends_persona_prompt(self):
        messages = FakeMessages('{"content": "Trust the process.", "followUpQuestions": ["What scares you?"]}')
        client = ClaudeCompletionClient(client=SimpleNamespace(messages=messages))

        result = await client.complete(request())

        assert result.text == "Trust the process."
        assert result.suggestions == ["What scares you?"]
        call = messages.calls[0]
        assert call["system"].startswith("You are Sage.")
        assert "wise mentor personality" in call["system"]
        assert call["messages"] == [{"role": "user", "content": "What now?"}]
