"""Data models for the artifact bot."""

from artifact_bot.models.project_models import ProjectContext
from artifact_bot.models.protocol_models import (
    ORACLE_RESPONSE_ADAPTER,
    ArtifactResult,
    ChatChoice,
    ChatCompletion,
    ChatMessage,
    ConversationMessage,
    FileRequest,
    OracleResponse,
    ResolvedFile,
)
from artifact_bot.models.report_models import (
    ArtifactOutcome,
    BatchReport,
    FailureReason,
    FileFailure,
    ProgressEvent,
)

__all__ = [
    "ORACLE_RESPONSE_ADAPTER",
    "ArtifactOutcome",
    "ArtifactResult",
    "BatchReport",
    "ChatChoice",
    "ChatCompletion",
    "ChatMessage",
    "ConversationMessage",
    "FailureReason",
    "FileFailure",
    "FileRequest",
    "OracleResponse",
    "ProgressEvent",
    "ProjectContext",
    "ResolvedFile",
]
