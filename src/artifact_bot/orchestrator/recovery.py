"""Pure helper functions for the validate/heal decision logic.

All functions are stateless and have no external dependencies.
"""

from artifact_bot.models import ArtifactOutcome, FailureReason
from artifact_bot.orchestrator.state import OUTCOME_FAILURE, OUTCOME_SUCCESS, ArtifactState


def is_terminal(state: ArtifactState) -> bool:
    return state["outcome"] in (OUTCOME_SUCCESS, OUTCOME_FAILURE)


def after_init(state: ArtifactState) -> str:
    """Router: validate an existing artifact, otherwise generate one."""
    if is_terminal(state):
        return "done"
    return "validate" if state["artifact_existed"] else "generate"


def continue_or_end(state: ArtifactState) -> str:
    """Router after generate/heal: "done" once an outcome is set."""
    return "done" if is_terminal(state) else "validate"


def decide_after_validation(state: ArtifactState) -> str:
    """Router after validate_node.

    Decision logic:
    1. outcome already set (valid artifact or validation error) -> "done"
    2. healing disabled -> "fail"
    3. attempt < max_attempts -> "heal"
    4. else -> "fail" (attempts exhausted)
    """
    if is_terminal(state):
        return "done"
    if not state["healing_enabled"]:
        return "fail"
    if state["attempt"] < state["max_attempts"]:
        return "heal"
    return "fail"


def failure_reason_for(state: ArtifactState) -> FailureReason:
    """Which budget ended a failing lifecycle."""
    if not state["healing_enabled"]:
        return FailureReason.HEALING_DISABLED
    return FailureReason.ATTEMPTS_EXHAUSTED


def outcome_from_state(state: ArtifactState) -> ArtifactOutcome:
    """Convert a final graph state into an ArtifactOutcome."""
    success = state["outcome"] == OUTCOME_SUCCESS
    return ArtifactOutcome(
        source_path=state["source_path"],
        artifact_path=state["artifact_path"],
        success=success,
        attempts=state["attempt"],
        failure_reason=None if success else state["failure_reason"],
        verdict=None if success else state["verdict"],
        errors=list(state["errors"]),
    )
