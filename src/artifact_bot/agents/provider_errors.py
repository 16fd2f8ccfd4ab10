"""Classification of oracle client errors into fatal and recoverable."""

from artifact_bot.agents.exceptions import (
    FatalProviderError,
    ProviderAuthenticationError,
    RateLimitExceededError,
)

RATE_LIMIT_STATUS = 429
AUTH_STATUSES = frozenset({401, 403})
AUTH_MARKER = "AI Provider Authentication Error"


def _status_code(error: BaseException) -> int | None:
    # openai/anthropic APIStatusError expose status_code; other clients use status
    for attr in ("status_code", "status", "statusCode"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def check_and_raise_fatal_error(error: BaseException) -> None:
    """Re-raise ``error`` as a FatalProviderError if it is one.

    Returns normally for recoverable errors so the caller can handle them.

    Raises:
        RateLimitExceededError: On HTTP 429, "429" or "usage limit" messages.
        ProviderAuthenticationError: On HTTP 401/403 or an auth marker.
    """
    if isinstance(error, FatalProviderError):
        raise error

    message = str(error)
    status = _status_code(error)

    if status == RATE_LIMIT_STATUS or "429" in message or "usage limit" in message.lower():
        raise RateLimitExceededError(
            f"AI Provider Rate Limit Exceeded: {message}"
        ) from error

    if status in AUTH_STATUSES or AUTH_MARKER in message:
        raise ProviderAuthenticationError(
            f"{AUTH_MARKER} ({status or 'Unknown'}): {message}"
        ) from error
