"""Exceptions for agent operations."""


class AgentError(Exception):
    """Base exception for all agent operations."""


class OracleConfigError(AgentError):
    """Raised when no usable oracle client can be configured."""


class HandlerError(AgentError):
    """Raised when an artifact handler cannot complete an operation."""


class ProtocolError(AgentError):
    """Base exception for conversation protocol failures.

    Terminal for the run that raised it; never retried by the engine.
    """


class EmptyOracleResponse(ProtocolError):
    """Raised when the oracle returns no choices."""


class InvalidOracleResponse(ProtocolError):
    """Raised when the first choice has no usable text content."""


class MalformedProtocolResponse(ProtocolError):
    """Raised when a turn cannot be parsed as a protocol message."""


class IterationBudgetExceeded(ProtocolError):
    """Raised when a run ends without a terminal result."""

    def __init__(self, max_iterations: int) -> None:
        self.max_iterations = max_iterations
        super().__init__(
            f"Agent failed to produce a result after {max_iterations} iterations"
        )


class FatalProviderError(AgentError):
    """Provider failure that must abort work instead of burning retries."""


class RateLimitExceededError(FatalProviderError):
    """Raised on rate-limit or quota exhaustion (HTTP 429)."""


class ProviderAuthenticationError(FatalProviderError):
    """Raised on authentication or authorization failures (HTTP 401/403)."""
