"""Bounded multi-turn conversation with the oracle.

The oracle either answers with a finished artifact or asks for more project
files. Requested files are read through the sandboxed store and fed back as
the next user turn until a result arrives or the iteration budget runs out.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from pydantic import ValidationError

from artifact_bot.agents.exceptions import (
    EmptyOracleResponse,
    InvalidOracleResponse,
    IterationBudgetExceeded,
    MalformedProtocolResponse,
)
from artifact_bot.agents.oracle_client import DEFAULT_MODEL, OracleClient
from artifact_bot.agents.provider_errors import check_and_raise_fatal_error
from artifact_bot.models import (
    ORACLE_RESPONSE_ADAPTER,
    ArtifactResult,
    ConversationMessage,
    FileRequest,
    ResolvedFile,
)
from artifact_bot.utils.exceptions import FileStoreError
from artifact_bot.utils.extensions import sibling_candidates
from artifact_bot.utils.file_store import ProjectFileStore
from artifact_bot.utils.markdown import clean_code_content, strip_markdown_code_blocks

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5
DEFAULT_TEMPERATURE = 0.2

# A None or empty-string return falls through to the cleaned oracle code
SuccessHook = Callable[[ArtifactResult], Optional[str]]


@dataclass
class TurnStep:
    """Result of one oracle turn: either a final artifact or a file request."""

    raw_content: str
    result: str | None = None
    request: FileRequest | None = None

    @property
    def complete(self) -> bool:
        return self.result is not None


def parse_oracle_response(content: str) -> ArtifactResult | FileRequest:
    """Parse one oracle turn into a protocol message.

    Raises:
        MalformedProtocolResponse: If the text is not JSON, or the JSON does
            not match a known ``action``.
    """
    payload = strip_markdown_code_blocks(content)
    try:
        return ORACLE_RESPONSE_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise MalformedProtocolResponse(
            f"Oracle response was not a valid protocol message: {exc.errors()[0]['msg']}"
        ) from exc


def format_file_context(resolved_files: list[ResolvedFile]) -> str:
    """Render resolved files as the next user turn."""
    sections = []
    for resolved in resolved_files:
        if resolved.content is not None:
            if resolved.was_redirected:
                header = f"--- FILE: {resolved.requested_path} (Resolved to {resolved.resolved_path}) ---"
            else:
                header = f"--- FILE: {resolved.requested_path} ---"
            sections.append(f"{header}\n{resolved.content}")
        else:
            sections.append(
                f"--- FILE: {resolved.requested_path} ---\n[Error reading file: {resolved.error}]"
            )
    file_context = "\n\n".join(sections) if sections else "(no files were requested)"
    return (
        f"Here are the requested files:\n\n{file_context}\n\n"
        "Please proceed with generating the solution, "
        "or request more files if absolutely necessary."
    )


class AgenticRunner:
    """Drives one bounded exchange with the oracle to obtain an artifact.

    A runner may be reused, but every ``run`` call starts from a fresh
    transcript; nothing is carried over between runs.
    """

    def __init__(
        self,
        oracle: OracleClient,
        file_store: ProjectFileStore,
        model: str = DEFAULT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ) -> None:
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.oracle = oracle
        self.file_store = file_store
        self.model = model
        self.temperature = temperature
        self.max_iterations = max_iterations

    def run(self, initial_prompt: str, on_success: SuccessHook | None = None) -> str:
        """Run the conversation until the oracle returns an artifact.

        Args:
            initial_prompt: Seeds the transcript as the system message.
            on_success: Optional hook given the parsed ArtifactResult; a
                non-empty return value replaces the cleaned code.

        Returns:
            The artifact code.

        Raises:
            EmptyOracleResponse: The oracle returned no choices.
            InvalidOracleResponse: The first choice had no text content.
            MalformedProtocolResponse: A turn was not a protocol message.
            IterationBudgetExceeded: No result within max_iterations turns.
            FatalProviderError: Rate-limit or authentication failure.
        """
        messages: list[ConversationMessage] = [
            ConversationMessage(role="system", content=initial_prompt)
        ]

        for iteration in range(1, self.max_iterations + 1):
            step = self._perform_turn(messages, on_success)
            if step.complete:
                logger.debug("Agent finished after %d turn(s)", iteration)
                return step.result

            files = step.request.files
            logger.info("Agent requested files: %s", ", ".join(files) or "(none)")

            # Keep the assistant's own turn so its reasoning carries forward
            messages.append(ConversationMessage(role="assistant", content=step.raw_content))
            resolved_files = [self.resolve_file(file_path) for file_path in files]
            messages.append(
                ConversationMessage(role="user", content=format_file_context(resolved_files))
            )

        raise IterationBudgetExceeded(self.max_iterations)

    def _perform_turn(
        self,
        messages: list[ConversationMessage],
        on_success: SuccessHook | None,
    ) -> TurnStep:
        try:
            response = self.oracle.create_chat_completion(
                model=self.model,
                temperature=self.temperature,
                messages=list(messages),
            )
        except Exception as exc:
            check_and_raise_fatal_error(exc)
            raise

        if not response.choices:
            raise EmptyOracleResponse(f"{self.oracle.provider} AI did not return any choices")

        content = response.choices[0].message.content
        if not isinstance(content, str) or not content.strip():
            raise InvalidOracleResponse(
                f"{self.oracle.provider} AI returned empty or invalid content"
            )

        parsed = parse_oracle_response(content)

        if isinstance(parsed, ArtifactResult):
            if on_success is not None:
                hooked = on_success(parsed)
                if hooked:
                    return TurnStep(raw_content=content, result=hooked)
            return TurnStep(raw_content=content, result=clean_code_content(parsed.code))

        return TurnStep(raw_content=content, request=parsed)

    def resolve_file(self, file_path: str) -> ResolvedFile:
        """Read a requested file, falling back to sibling extensions.

        Never raises for unreadable files; the error text is captured in the
        returned record instead.
        """
        try:
            content = self.file_store.read(file_path)
            return ResolvedFile(requested_path=file_path, resolved_path=file_path, content=content)
        except FileStoreError as exc:
            original_error = str(exc)

        for candidate in sibling_candidates(file_path):
            try:
                content = self.file_store.read(candidate)
            except FileStoreError:
                continue
            logger.debug("Resolved %s to %s", file_path, candidate)
            return ResolvedFile(requested_path=file_path, resolved_path=candidate, content=content)

        return ResolvedFile(requested_path=file_path, resolved_path=file_path, error=original_error)
