"""Runtime configuration models.

Values are supplied by the CLI (or any caller) at construction time; the
core never reads environment variables or config files itself.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from artifact_bot.agents.agentic_runner import DEFAULT_MAX_ITERATIONS, DEFAULT_TEMPERATURE
from artifact_bot.agents.oracle_client import DEFAULT_MODEL

DEFAULT_MAX_ATTEMPTS = 3
MAX_ATTEMPTS_LIMIT = 10
DEFAULT_TIMEOUT = 120


class AIConfig(BaseModel):
    model_config = ConfigDict(frozen=False)

    provider: str = "auto"            # "auto" | "anthropic" | "openai"
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)


class HealingConfig(BaseModel):
    model_config = ConfigDict(frozen=False)

    enabled: bool = True
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @field_validator("max_attempts")
    @classmethod
    def _clamp_attempts(cls, value: int) -> int:
        return max(1, min(value, MAX_ATTEMPTS_LIMIT))


class OutputConfig(BaseModel):
    model_config = ConfigDict(frozen=False)

    output_dir: str | None = None
    exclude: list[str] = Field(default_factory=list)


class BotConfig(BaseModel):
    """Complete configuration for one artifact-bot run."""

    model_config = ConfigDict(frozen=False)

    ai: AIConfig = Field(default_factory=AIConfig)
    healing: HealingConfig = Field(default_factory=HealingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    timeout_seconds: int = DEFAULT_TIMEOUT
    allow_no_runner_pass: bool = False
