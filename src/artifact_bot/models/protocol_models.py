"""Pydantic models for the oracle conversation protocol."""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class ConversationMessage(BaseModel):
    """A single transcript entry sent to the oracle."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str


class FileRequest(BaseModel):
    """Oracle turn asking for more project files before it can answer."""

    model_config = ConfigDict(frozen=False)

    action: Literal["request_files"]
    files: list[str] = Field(default_factory=list)


class ArtifactResult(BaseModel):
    """Oracle turn carrying a finished artifact."""

    model_config = ConfigDict(frozen=False)

    action: Literal["generate", "fix", "success"]
    code: str


OracleResponse = Annotated[
    Union[FileRequest, ArtifactResult],
    Field(discriminator="action"),
]

ORACLE_RESPONSE_ADAPTER: TypeAdapter[OracleResponse] = TypeAdapter(OracleResponse)


class ResolvedFile(BaseModel):
    """Outcome of resolving one requested path against the file store."""

    model_config = ConfigDict(frozen=False)

    requested_path: str
    resolved_path: str
    content: Optional[str] = None
    error: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one_of_content_or_error(self) -> "ResolvedFile":
        if (self.content is None) == (self.error is None):
            raise ValueError("ResolvedFile needs exactly one of content or error")
        return self

    @property
    def was_redirected(self) -> bool:
        return self.content is not None and self.resolved_path != self.requested_path


class ChatMessage(BaseModel):
    """Message portion of an oracle choice."""

    model_config = ConfigDict(frozen=False)

    role: str = "assistant"
    content: Optional[str] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(frozen=False)

    index: int = 0
    message: ChatMessage
    finish_reason: Optional[str] = None


class ChatCompletion(BaseModel):
    """Provider-neutral oracle reply: only the choices the engine inspects."""

    model_config = ConfigDict(frozen=False)

    choices: list[ChatChoice] = Field(default_factory=list)
    model: Optional[str] = None
