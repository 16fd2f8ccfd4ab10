"""Explicit handler registry, resolved once per run."""

from artifact_bot.agents.exceptions import HandlerError
from artifact_bot.agents.handlers.base import ArtifactHandler, ArtifactKind
from artifact_bot.agents.handlers.storybook import StorybookHandler
from artifact_bot.agents.handlers.unit_test import UnitTestHandler
from artifact_bot.agents.oracle_client import OracleClient
from artifact_bot.config import BotConfig
from artifact_bot.utils.file_store import ProjectFileStore


def build_handlers(
    oracle: OracleClient,
    file_store: ProjectFileStore,
    config: BotConfig | None = None,
) -> dict[ArtifactKind, ArtifactHandler]:
    """Construct one handler per artifact kind."""
    config = config or BotConfig()
    return {
        ArtifactKind.STORYBOOK: StorybookHandler(
            oracle,
            file_store,
            ai_config=config.ai,
            timeout_seconds=config.timeout_seconds,
        ),
        ArtifactKind.UNIT_TEST: UnitTestHandler(
            oracle,
            file_store,
            ai_config=config.ai,
            timeout_seconds=config.timeout_seconds,
            allow_no_runner_pass=config.allow_no_runner_pass,
        ),
    }


def resolve_handler(
    handlers: dict[ArtifactKind, ArtifactHandler],
    kind: ArtifactKind | str,
) -> ArtifactHandler:
    """Look up the handler for ``kind``.

    Raises:
        HandlerError: If ``kind`` is unknown or has no registered handler.
    """
    try:
        artifact_kind = ArtifactKind(kind)
    except ValueError as exc:
        raise HandlerError(f"Unknown artifact kind: {kind}") from exc
    handler = handlers.get(artifact_kind)
    if handler is None:
        raise HandlerError(f"No handler registered for artifact kind: {artifact_kind.value}")
    return handler
