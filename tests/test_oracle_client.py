"""Tests for the oracle adapters and provider selection."""
from unittest.mock import MagicMock

import pytest

from artifact_bot.agents.exceptions import OracleConfigError
from artifact_bot.agents.oracle_client import (
    OPENAI_FALLBACK_MODEL,
    AnthropicOracleClient,
    OpenAIOracleClient,
    OracleClient,
    build_oracle_client,
)
from artifact_bot.models import ConversationMessage


def _messages(*pairs):
    return [ConversationMessage(role=role, content=content) for role, content in pairs]


def _text_block(text):
    block = MagicMock()
    block.type = "text"
    block.text = text
    return block


@pytest.fixture
def clear_provider_env(monkeypatch):
    for name in ("ANTHROPIC_API_KEY", "CLAUDE_CODE_OAUTH_TOKEN", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)


class TestAnthropicOracleClient:
    def test_system_prompt_opens_as_user_turn(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = MagicMock(
            content=[_text_block("done")], stop_reason="end_turn", model="claude-x"
        )
        client = AnthropicOracleClient(client=sdk)

        client.create_chat_completion(
            model="claude-x",
            temperature=0.2,
            messages=_messages(("system", "instructions"), ("assistant", "req"), ("user", "files")),
        )

        sent = sdk.messages.create.call_args.kwargs["messages"]
        assert sent == [
            {"role": "user", "content": "instructions"},
            {"role": "assistant", "content": "req"},
            {"role": "user", "content": "files"},
        ]

    def test_consecutive_same_role_messages_are_merged(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = MagicMock(content=[_text_block("ok")])
        client = AnthropicOracleClient(client=sdk)

        client.create_chat_completion("m", 0.0, _messages(("system", "a"), ("user", "b")))

        sent = sdk.messages.create.call_args.kwargs["messages"]
        assert sent == [{"role": "user", "content": "a\n\nb"}]

    def test_response_text_blocks_become_one_choice(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = MagicMock(
            content=[_text_block("part one "), _text_block("part two")],
            stop_reason="end_turn",
            model="claude-x",
        )
        result = AnthropicOracleClient(client=sdk).create_chat_completion(
            "claude-x", 0.2, _messages(("system", "p"))
        )
        assert len(result.choices) == 1
        assert result.choices[0].message.content == "part one part two"
        assert result.choices[0].finish_reason == "end_turn"
        assert result.model == "claude-x"

    def test_empty_content_yields_no_choices(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = MagicMock(content=[])
        result = AnthropicOracleClient(client=sdk).create_chat_completion(
            "m", 0.2, _messages(("system", "p"))
        )
        assert result.choices == []

    def test_passes_max_tokens(self):
        sdk = MagicMock()
        sdk.messages.create.return_value = MagicMock(content=[_text_block("x")])
        AnthropicOracleClient(client=sdk, max_tokens=1234).create_chat_completion(
            "m", 0.2, _messages(("system", "p"))
        )
        assert sdk.messages.create.call_args.kwargs["max_tokens"] == 1234


class TestOpenAIOracleClient:
    def _sdk(self, content="hello"):
        sdk = MagicMock()
        choice = MagicMock()
        choice.message.content = content
        choice.finish_reason = "stop"
        sdk.chat.completions.create.return_value = MagicMock(choices=[choice], model="gpt-4o-mini")
        return sdk

    def test_claude_model_maps_to_fallback(self):
        sdk = self._sdk()
        OpenAIOracleClient(client=sdk).create_chat_completion(
            "claude-sonnet-4-5-20250929", 0.2, _messages(("system", "p"))
        )
        assert sdk.chat.completions.create.call_args.kwargs["model"] == OPENAI_FALLBACK_MODEL

    def test_keeps_roles_including_system(self):
        sdk = self._sdk()
        OpenAIOracleClient(client=sdk).create_chat_completion(
            "gpt-4o", 0.2, _messages(("system", "p"), ("user", "u"))
        )
        kwargs = sdk.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["messages"] == [
            {"role": "system", "content": "p"},
            {"role": "user", "content": "u"},
        ]

    def test_converts_choices(self):
        result = OpenAIOracleClient(client=self._sdk("body")).create_chat_completion(
            "gpt-4o", 0.2, _messages(("system", "p"))
        )
        assert result.choices[0].message.content == "body"
        assert result.choices[0].finish_reason == "stop"

    def test_non_string_content_becomes_none(self):
        result = OpenAIOracleClient(client=self._sdk(None)).create_chat_completion(
            "gpt-4o", 0.2, _messages(("system", "p"))
        )
        assert result.choices[0].message.content is None


class TestBuildOracleClient:
    def test_auto_prefers_anthropic(self, clear_provider_env, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "a-key")
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        client = build_oracle_client()
        assert isinstance(client, AnthropicOracleClient)
        assert isinstance(client, OracleClient)

    def test_oauth_token_counts_as_anthropic_key(self, clear_provider_env, monkeypatch):
        monkeypatch.setenv("CLAUDE_CODE_OAUTH_TOKEN", "tok")
        assert isinstance(build_oracle_client("auto"), AnthropicOracleClient)

    def test_auto_falls_back_to_openai(self, clear_provider_env, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        assert isinstance(build_oracle_client("auto"), OpenAIOracleClient)

    def test_explicit_openai(self, clear_provider_env):
        client = build_oracle_client("openai", openai_api_key="o-key", anthropic_api_key="a-key")
        assert isinstance(client, OpenAIOracleClient)

    def test_missing_keys_raise(self, clear_provider_env):
        with pytest.raises(OracleConfigError):
            build_oracle_client("auto")

    def test_explicit_anthropic_without_key_raises(self, clear_provider_env, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        with pytest.raises(OracleConfigError, match="anthropic"):
            build_oracle_client("anthropic")

    def test_unknown_provider_raises(self, clear_provider_env):
        with pytest.raises(OracleConfigError, match="Unsupported provider"):
            build_oracle_client("mistral")
