"""Oracle port and its Anthropic/OpenAI adapters.

The engine and handlers only see ``ChatCompletion``; native SDK response
objects never leave this module.
"""

import logging
import os
from typing import Any, Literal, Protocol, Sequence, runtime_checkable

from anthropic import Anthropic
import openai

from artifact_bot.agents.exceptions import OracleConfigError
from artifact_bot.models import ChatChoice, ChatCompletion, ChatMessage, ConversationMessage

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
OPENAI_FALLBACK_MODEL = "gpt-4o-mini"
MAX_API_TOKENS = 8192

ProviderName = Literal["anthropic", "openai"]


@runtime_checkable
class OracleClient(Protocol):
    """Text-completion oracle: transcript in, next turn out."""

    provider: str

    def create_chat_completion(
        self,
        model: str,
        temperature: float,
        messages: Sequence[ConversationMessage],
    ) -> ChatCompletion:
        """Return the oracle's reply choices for ``messages``."""


def _text_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class OpenAIOracleClient:
    """Oracle adapter over ``openai.OpenAI().chat.completions``."""

    provider = "openai"

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        self._client = client or openai.OpenAI(api_key=api_key)

    def _resolve_model(self, model: str) -> str:
        if model.startswith("claude-"):
            return OPENAI_FALLBACK_MODEL
        return model

    def create_chat_completion(
        self,
        model: str,
        temperature: float,
        messages: Sequence[ConversationMessage],
    ) -> ChatCompletion:
        response = self._client.chat.completions.create(
            model=self._resolve_model(model),
            temperature=temperature,
            messages=[{"role": m.role, "content": m.content} for m in messages],
        )
        choices = []
        for index, choice in enumerate(getattr(response, "choices", None) or []):
            message = getattr(choice, "message", None)
            choices.append(
                ChatChoice(
                    index=index,
                    message=ChatMessage(content=_text_or_none(getattr(message, "content", None))),
                    finish_reason=_text_or_none(getattr(choice, "finish_reason", None)),
                )
            )
        return ChatCompletion(choices=choices, model=_text_or_none(getattr(response, "model", None)))


class AnthropicOracleClient:
    """Oracle adapter over ``anthropic.Anthropic().messages``.

    The Messages API has no system role inside ``messages`` and expects the
    conversation to open with a user turn, so system content opens the
    conversation as the first user message.
    """

    provider = "anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        client: Any = None,
        max_tokens: int = MAX_API_TOKENS,
    ) -> None:
        self._client = client or Anthropic(api_key=api_key)
        self.max_tokens = max_tokens

    def _to_anthropic_messages(
        self, messages: Sequence[ConversationMessage]
    ) -> list[dict[str, str]]:
        system_text = "\n\n".join(m.content for m in messages if m.role == "system")
        converted: list[dict[str, str]] = []
        if system_text:
            converted.append({"role": "user", "content": system_text})
        for message in messages:
            if message.role == "system":
                continue
            if converted and converted[-1]["role"] == message.role:
                converted[-1]["content"] += "\n\n" + message.content
            else:
                converted.append({"role": message.role, "content": message.content})
        return converted

    def create_chat_completion(
        self,
        model: str,
        temperature: float,
        messages: Sequence[ConversationMessage],
    ) -> ChatCompletion:
        response = self._client.messages.create(
            model=model,
            max_tokens=self.max_tokens,
            temperature=temperature,
            messages=self._to_anthropic_messages(messages),
        )
        blocks = getattr(response, "content", None) or []
        if not blocks:
            return ChatCompletion(choices=[])
        text_parts = [
            block.text
            for block in blocks
            if getattr(block, "type", None) == "text" and isinstance(getattr(block, "text", None), str)
        ]
        content = "".join(text_parts) if text_parts else None
        return ChatCompletion(
            choices=[
                ChatChoice(
                    message=ChatMessage(content=content),
                    finish_reason=_text_or_none(getattr(response, "stop_reason", None)),
                )
            ],
            model=_text_or_none(getattr(response, "model", None)),
        )


def build_oracle_client(
    provider: str = "auto",
    anthropic_api_key: str | None = None,
    openai_api_key: str | None = None,
) -> OracleClient:
    """Create an oracle client for ``provider``.

    Keys fall back to ANTHROPIC_API_KEY / CLAUDE_CODE_OAUTH_TOKEN and
    OPENAI_API_KEY. ``auto`` prefers Anthropic when its key is present.

    Raises:
        OracleConfigError: For an unknown provider or a missing key.
    """
    if provider not in {"auto", "anthropic", "openai"}:
        raise OracleConfigError(f"Unsupported provider: {provider}")

    anthropic_key = (
        anthropic_api_key
        or os.getenv("ANTHROPIC_API_KEY")
        or os.getenv("CLAUDE_CODE_OAUTH_TOKEN")
    )
    openai_key = openai_api_key or os.getenv("OPENAI_API_KEY")

    if provider == "anthropic" or (provider == "auto" and anthropic_key):
        if not anthropic_key:
            raise OracleConfigError(
                "No Anthropic API key found for --llm-provider=anthropic."
            )
        logger.debug("Using Anthropic oracle client")
        return AnthropicOracleClient(api_key=anthropic_key)

    if openai_key:
        logger.debug("Using OpenAI oracle client")
        return OpenAIOracleClient(api_key=openai_key)

    if provider == "openai":
        raise OracleConfigError("No OpenAI API key found for --llm-provider=openai.")
    raise OracleConfigError(
        "No Anthropic or OpenAI API key found. "
        "Provide ANTHROPIC_API_KEY, CLAUDE_CODE_OAUTH_TOKEN, or OPENAI_API_KEY env vars."
    )
