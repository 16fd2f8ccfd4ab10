"""Agent components for the artifact bot."""

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
from artifact_bot.agents.agentic_runner import AgenticRunner
from artifact_bot.agents.oracle_client import (
    AnthropicOracleClient,
    OpenAIOracleClient,
    OracleClient,
    build_oracle_client,
)
from artifact_bot.agents.provider_errors import check_and_raise_fatal_error

__all__ = [
    "AgentError",
    "AgenticRunner",
    "AnthropicOracleClient",
    "EmptyOracleResponse",
    "FatalProviderError",
    "HandlerError",
    "InvalidOracleResponse",
    "IterationBudgetExceeded",
    "MalformedProtocolResponse",
    "OpenAIOracleClient",
    "OracleClient",
    "OracleConfigError",
    "ProtocolError",
    "ProviderAuthenticationError",
    "RateLimitExceededError",
    "build_oracle_client",
    "check_and_raise_fatal_error",
]
