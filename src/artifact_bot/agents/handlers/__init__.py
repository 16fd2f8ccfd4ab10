"""Artifact handlers: one per artifact kind."""

from artifact_bot.agents.handlers.base import ArtifactHandler, ArtifactKind, OracleBackedHandler
from artifact_bot.agents.handlers.registry import build_handlers, resolve_handler
from artifact_bot.agents.handlers.storybook import StorybookHandler
from artifact_bot.agents.handlers.unit_test import UnitTestHandler

__all__ = [
    "ArtifactHandler",
    "ArtifactKind",
    "OracleBackedHandler",
    "StorybookHandler",
    "UnitTestHandler",
    "build_handlers",
    "resolve_handler",
]
