"""LangGraph healing orchestrator for generated artifacts."""

from artifact_bot.orchestrator.exceptions import GraphBuildError, OrchestratorError
from artifact_bot.orchestrator.graph import build_artifact_graph
from artifact_bot.orchestrator.state import ArtifactState, make_initial_state
from artifact_bot.orchestrator.writer import ArtifactWriter

__all__ = [
    "ArtifactState",
    "ArtifactWriter",
    "GraphBuildError",
    "OrchestratorError",
    "build_artifact_graph",
    "make_initial_state",
]
