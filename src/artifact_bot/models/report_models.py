"""Report models for artifact lifecycles and batch runs."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FailureReason(str, Enum):
    """Why an artifact lifecycle ended without a valid artifact."""

    GENERATION_FAILED = "generation_failed"
    EMPTY_GENERATION = "empty_generation"
    HEALING_DISABLED = "healing_disabled"
    ATTEMPTS_EXHAUSTED = "attempts_exhausted"
    EMPTY_FIX = "empty_fix"
    FIX_FAILED = "fix_failed"
    VALIDATION_ERROR = "validation_error"


class ArtifactOutcome(BaseModel):
    model_config = ConfigDict(frozen=False)

    source_path: str
    artifact_path: str
    success: bool
    attempts: int = 0
    failure_reason: FailureReason | None = None
    verdict: str | None = None   # Last diagnostic when success is False
    errors: list[str] = Field(default_factory=list)

    def describe_failure(self) -> str:
        if self.success:
            return ""
        reason = self.failure_reason.value if self.failure_reason else "unknown"
        if self.verdict:
            return f"{reason}: {self.verdict}"
        if self.errors:
            return f"{reason}: {self.errors[-1]}"
        return reason


class ProgressEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int                # 1-based position in the filtered batch
    total: int
    path: str
    elapsed_seconds: float


class FileFailure(BaseModel):
    model_config = ConfigDict(frozen=False)

    file: str
    error: str


class BatchReport(BaseModel):
    model_config = ConfigDict(frozen=False)

    generated_files: list[str] = Field(default_factory=list)
    failures: list[FileFailure] = Field(default_factory=list)
    skipped_files: list[str] = Field(default_factory=list)   # Removed by exclusion globs
    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: datetime | None = None

    @property
    def success_count(self) -> int:
        return len(self.generated_files)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
