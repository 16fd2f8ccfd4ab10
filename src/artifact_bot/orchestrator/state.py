"""State definition for the per-artifact healing graph."""

import operator
from typing import Annotated, TypedDict

from artifact_bot.config import MAX_ATTEMPTS_LIMIT
from artifact_bot.models import FailureReason

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"


class ArtifactState(TypedDict):
    """Lifecycle state of one artifact.

    ``errors`` accumulates across nodes; every other field is overwritten.
    """

    # Input
    source_path: str
    artifact_path: str
    max_attempts: int
    healing_enabled: bool

    # Lifecycle
    artifact_existed: bool
    current_content: str | None
    needs_write: bool
    attempt: int
    verdict: str | None

    # Result
    outcome: str | None
    failure_reason: FailureReason | None

    errors: Annotated[list[str], operator.add]


def make_initial_state(
    source_path: str,
    artifact_path: str,
    max_attempts: int = 3,
    healing_enabled: bool = True,
) -> ArtifactState:
    """Create the initial state for one artifact.

    Args:
        source_path: Project-relative path of the source file.
        artifact_path: Project-relative path the artifact is written to.
        max_attempts: Validation attempts before giving up, clamped to
            [1, MAX_ATTEMPTS_LIMIT].
        healing_enabled: Whether failed validations trigger a heal.

    Returns:
        ArtifactState with lifecycle fields at their defaults.
    """
    return {
        "source_path": source_path,
        "artifact_path": artifact_path,
        "max_attempts": max(1, min(max_attempts, MAX_ATTEMPTS_LIMIT)),
        "healing_enabled": healing_enabled,
        "artifact_existed": False,
        "current_content": None,
        "needs_write": False,
        "attempt": 1,
        "verdict": None,
        "outcome": None,
        "failure_reason": None,
        "errors": [],
    }
