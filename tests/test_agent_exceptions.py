"""Tests for the exception hierarchies."""
import pytest

from artifact_bot.agents.exceptions import (
    AgentError,
    EmptyOracleResponse,
    FatalProviderError,
    HandlerError,
    InvalidOracleResponse,
    IterationBudgetExceeded,
    MalformedProtocolResponse,
    OracleConfigError,
    ProtocolError,
    ProviderAuthenticationError,
    RateLimitExceededError,
)
from artifact_bot.orchestrator.exceptions import GraphBuildError, OrchestratorError
from artifact_bot.utils.exceptions import FileStoreError, PathTraversalError


@pytest.mark.parametrize(
    "exc_type, base",
    [
        (OracleConfigError, AgentError),
        (HandlerError, AgentError),
        (ProtocolError, AgentError),
        (EmptyOracleResponse, ProtocolError),
        (InvalidOracleResponse, ProtocolError),
        (MalformedProtocolResponse, ProtocolError),
        (IterationBudgetExceeded, ProtocolError),
        (FatalProviderError, AgentError),
        (RateLimitExceededError, FatalProviderError),
        (ProviderAuthenticationError, FatalProviderError),
        (GraphBuildError, OrchestratorError),
        (PathTraversalError, FileStoreError),
    ],
)
def test_hierarchy(exc_type, base):
    assert issubclass(exc_type, base)


def test_fatal_errors_are_not_protocol_errors():
    assert not issubclass(FatalProviderError, ProtocolError)


def test_iteration_budget_message_and_attribute():
    error = IterationBudgetExceeded(5)
    assert error.max_iterations == 5
    assert str(error) == "Agent failed to produce a result after 5 iterations"


def test_message_preserved():
    with pytest.raises(AgentError, match="boom"):
        raise HandlerError("boom")
