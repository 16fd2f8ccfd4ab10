"""LangGraph state machine for one artifact's generate/validate/heal lifecycle.

Edge topology:
  START -> init_node -> {validate_node (existing), generate_node (absent), END (unreadable)}
  generate_node -> {validate_node, END (generation failed)}
  validate_node -> decide -> {END (valid), heal_node, fail_node}
  heal_node -> {validate_node, END (no usable fix)}
  fail_node -> END
"""

import logging
from typing import Callable

from langgraph.graph import END, START, StateGraph

from artifact_bot.agents.handlers.base import ArtifactHandler
from artifact_bot.agents.provider_errors import check_and_raise_fatal_error
from artifact_bot.models import FailureReason, ProjectContext
from artifact_bot.orchestrator.exceptions import GraphBuildError
from artifact_bot.orchestrator.recovery import (
    after_init,
    continue_or_end,
    decide_after_validation,
    failure_reason_for,
)
from artifact_bot.orchestrator.state import OUTCOME_FAILURE, OUTCOME_SUCCESS, ArtifactState
from artifact_bot.utils.exceptions import FileStoreError
from artifact_bot.utils.file_store import ProjectFileStore

logger = logging.getLogger(__name__)

# Steps outside the validate/heal cycle: init, generate, first validate, fail
FIXED_GRAPH_STEPS = 4


def recursion_limit_for(max_attempts: int) -> int:
    """LangGraph step budget large enough for ``max_attempts`` heal cycles."""
    return FIXED_GRAPH_STEPS + 2 * max_attempts + 2


def _failure(reason: FailureReason, message: str) -> dict:
    return {
        "outcome": OUTCOME_FAILURE,
        "failure_reason": reason,
        "errors": [message],
    }


def make_init_node(file_store: ProjectFileStore) -> Callable[[ArtifactState], dict]:
    """Factory: returns a node that loads an existing artifact, if any.

    An invalid existing artifact is kept as the healing starting point
    instead of being regenerated.
    """

    def init_node(state: ArtifactState) -> dict:
        artifact_path = state["artifact_path"]
        if not file_store.exists(artifact_path):
            return {"artifact_existed": False}

        logger.info("Artifact already exists: %s, checking validity...", artifact_path)
        try:
            existing = file_store.read(artifact_path)
        except FileStoreError as exc:
            logger.info("Could not read existing artifact %s: %s", artifact_path, exc)
            return {
                "artifact_existed": True,
                **_failure(
                    FailureReason.VALIDATION_ERROR,
                    f"init_node: existing artifact {artifact_path} is unreadable: {exc}",
                ),
            }
        return {
            "artifact_existed": True,
            "current_content": existing,
            "needs_write": False,
        }

    return init_node


def make_generate_node(
    handler: ArtifactHandler,
    file_store: ProjectFileStore,
    project_context: ProjectContext,
) -> Callable[[ArtifactState], dict]:
    """Factory: returns a node that produces the first artifact version.

    Fatal provider errors propagate. Any other failure ends the lifecycle:
    there is nothing to heal yet.
    """

    def generate_node(state: ArtifactState) -> dict:
        source_path = state["source_path"]
        try:
            source_content = file_store.read(source_path)
            content = handler.generate_document(
                source_path,
                source_content,
                state["artifact_path"],
                project_context,
            )
        except Exception as exc:
            check_and_raise_fatal_error(exc)
            logger.info("Failed initial generation for %s: %s", source_path, exc)
            return _failure(
                FailureReason.GENERATION_FAILED,
                f"generate_node error for {source_path}: {exc}",
            )

        if not content:
            logger.info("Generation returned no content for %s", source_path)
            return _failure(
                FailureReason.EMPTY_GENERATION,
                f"generate_node: no content generated for {source_path}",
            )

        return {"current_content": content, "needs_write": True}

    return generate_node


def make_validate_node(
    handler: ArtifactHandler,
    file_store: ProjectFileStore,
    project_context: ProjectContext,
) -> Callable[[ArtifactState], dict]:
    """Factory: returns a node that writes the current content and validates it.

    The verdict is computed fresh on every call. A handler exception is a
    terminal failure for this artifact (fatal provider errors propagate).
    """

    def validate_node(state: ArtifactState) -> dict:
        artifact_path = state["artifact_path"]
        content = state["current_content"] or ""
        try:
            if state["needs_write"]:
                file_store.write(artifact_path, content)
            verdict = handler.validate_document(content, artifact_path, project_context)
        except Exception as exc:
            check_and_raise_fatal_error(exc)
            logger.info("Validation could not run for %s: %s", artifact_path, exc)
            return _failure(
                FailureReason.VALIDATION_ERROR,
                f"validate_node error for {artifact_path}: {exc}",
            )

        if verdict is None:
            if state["artifact_existed"] and not state["needs_write"]:
                logger.info("Existing artifact is valid: %s, skipping generation.", artifact_path)
            else:
                logger.info("Generated/Fixed artifact: %s", artifact_path)
            return {"verdict": None, "needs_write": False, "outcome": OUTCOME_SUCCESS}

        logger.debug("Validation error for %s: %s", artifact_path, verdict)
        return {"verdict": verdict, "needs_write": False}

    return validate_node


def make_heal_node(
    handler: ArtifactHandler,
    project_context: ProjectContext,
) -> Callable[[ArtifactState], dict]:
    """Factory: returns a node that asks the handler for a repaired candidate.

    An empty fix ends the lifecycle immediately; a non-empty one replaces the
    current content and consumes one attempt.
    """

    def heal_node(state: ArtifactState) -> dict:
        source_path = state["source_path"]
        attempt = state["attempt"]
        logger.info(
            "Attempting to fix artifact for %s (attempt %d/%d)...",
            source_path,
            attempt,
            state["max_attempts"],
        )
        try:
            fixed = handler.fix_document(
                state["current_content"] or "",
                source_path,
                state["artifact_path"],
                project_context,
                state["verdict"],
            )
        except Exception as exc:
            check_and_raise_fatal_error(exc)
            logger.info("Error during fix attempt for %s: %s", source_path, exc)
            return _failure(
                FailureReason.FIX_FAILED,
                f"heal_node error for {source_path} on attempt {attempt}: {exc}",
            )

        if not fixed:
            logger.info("Fix attempt failed to return content for %s", source_path)
            return _failure(
                FailureReason.EMPTY_FIX,
                f"heal_node: no content returned for {source_path} on attempt {attempt}",
            )

        return {
            "current_content": fixed,
            "needs_write": True,
            "attempt": attempt + 1,
            "verdict": None,
        }

    return heal_node


def fail_node(state: ArtifactState) -> dict:
    """Record why a failing artifact was not healed further."""
    reason = failure_reason_for(state)
    detail = " (max attempts reached)" if reason is FailureReason.ATTEMPTS_EXHAUSTED else ""
    logger.info("Failed to produce a valid artifact for %s%s", state["source_path"], detail)
    return _failure(
        reason,
        f"ABORT: {state['artifact_path']} invalid after {state['attempt']}/"
        f"{state['max_attempts']} attempt(s), healing "
        f"{'enabled' if state['healing_enabled'] else 'disabled'}",
    )


def build_artifact_graph(
    handler: ArtifactHandler,
    file_store: ProjectFileStore,
    project_context: ProjectContext,
):
    """Build and compile the per-artifact StateGraph.

    The compiled graph holds no per-artifact data and can be invoked once
    per target with a fresh ArtifactState.

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(ArtifactState)

        graph.add_node("init_node", make_init_node(file_store))
        graph.add_node("generate_node", make_generate_node(handler, file_store, project_context))
        graph.add_node("validate_node", make_validate_node(handler, file_store, project_context))
        graph.add_node("heal_node", make_heal_node(handler, project_context))
        graph.add_node("fail_node", fail_node)

        graph.add_edge(START, "init_node")
        graph.add_conditional_edges(
            "init_node",
            after_init,
            {"validate": "validate_node", "generate": "generate_node", "done": END},
        )
        graph.add_conditional_edges(
            "generate_node",
            continue_or_end,
            {"validate": "validate_node", "done": END},
        )
        graph.add_conditional_edges(
            "validate_node",
            decide_after_validation,
            {"done": END, "heal": "heal_node", "fail": "fail_node"},
        )
        graph.add_conditional_edges(
            "heal_node",
            continue_or_end,
            {"validate": "validate_node", "done": END},
        )
        graph.add_edge("fail_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build artifact graph: {exc}") from exc
