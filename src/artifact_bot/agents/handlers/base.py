"""Artifact handler capability interface and shared oracle plumbing."""

import logging
from enum import Enum
from typing import Optional, Protocol, runtime_checkable

from artifact_bot.agents.agentic_runner import AgenticRunner
from artifact_bot.agents.oracle_client import OracleClient
from artifact_bot.agents.provider_errors import check_and_raise_fatal_error
from artifact_bot.config import AIConfig
from artifact_bot.models import ConversationMessage, ProjectContext
from artifact_bot.utils.exceptions import FileStoreError
from artifact_bot.utils.file_store import ProjectFileStore
from artifact_bot.utils.markdown import clean_code_content

logger = logging.getLogger(__name__)


class ArtifactKind(str, Enum):
    STORYBOOK = "storybook"
    UNIT_TEST = "unit"


@runtime_checkable
class ArtifactHandler(Protocol):
    """Generates, validates and fixes one kind of artifact.

    The orchestrator relies only on the string-in, string-or-None-out
    contracts below.
    """

    def exclusion_patterns(self) -> list[str]:
        """Globs for source files this handler must never process."""

    def output_suffix(self) -> str:
        """Suffix inserted before the source extension, e.g. ".stories"."""

    def generate_document(
        self,
        source_path: str,
        source_content: str,
        target_path: str,
        project_context: ProjectContext,
    ) -> Optional[str]:
        """Return fresh artifact content, or None if nothing was produced."""

    def validate_document(
        self,
        content: str,
        target_path: str,
        project_context: ProjectContext,
    ) -> Optional[str]:
        """Return None when valid, otherwise a readable diagnostic."""

    def fix_document(
        self,
        content: str,
        source_path: str,
        target_path: str,
        project_context: ProjectContext,
        verdict: Optional[str] = None,
    ) -> Optional[str]:
        """Return a repaired candidate, or None if none could be produced."""


class OracleBackedHandler:
    """Shared helpers for handlers that talk to the oracle."""

    def __init__(
        self,
        oracle: OracleClient,
        file_store: ProjectFileStore,
        ai_config: AIConfig | None = None,
    ) -> None:
        self.oracle = oracle
        self.file_store = file_store
        self.ai_config = ai_config or AIConfig()

    def _new_runner(self) -> AgenticRunner:
        # One runner, and so one transcript, per generation or healing attempt
        return AgenticRunner(
            oracle=self.oracle,
            file_store=self.file_store,
            model=self.ai_config.model,
            temperature=self.ai_config.temperature,
            max_iterations=self.ai_config.max_iterations,
        )

    def _complete_once(self, prompt: str) -> str:
        """Single-turn completion returning cleaned code."""
        try:
            response = self.oracle.create_chat_completion(
                model=self.ai_config.model,
                temperature=self.ai_config.temperature,
                messages=[ConversationMessage(role="system", content=prompt)],
            )
        except Exception as exc:
            check_and_raise_fatal_error(exc)
            raise
        if not response.choices:
            return ""
        return clean_code_content(response.choices[0].message.content or "")

    def _read_source(self, source_path: str) -> str:
        try:
            return self.file_store.read(source_path)
        except FileStoreError:
            logger.debug("Could not read original source file: %s", source_path)
            return ""
