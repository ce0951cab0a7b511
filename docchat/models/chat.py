"""Chat session and message models."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a message."""

    USER = "user"
    ASSISTANT = "assistant"


class RelatedDocument(BaseModel):
    """Reference from a message to a page of some document."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    document_name: str
    page: int = Field(ge=1, description="1-indexed page number")


class Message(BaseModel):
    """One turn in a chat session. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    role: Role
    content: str = ""
    related_documents: tuple[RelatedDocument, ...] | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ChatSession(BaseModel):
    """A conversation scoped to exactly one document.

    ``document_name`` is a snapshot taken when the session is created and
    does not follow later renames of the document.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    document_id: str = Field(min_length=1)
    document_name: str = ""
    messages: tuple[Message, ...] = ()
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def last_message(self) -> Message | None:
        """Most recent message, if any."""
        return self.messages[-1] if self.messages else None

    def has_message(self, message_id: str) -> bool:
        """Check whether a message id is already used in this session."""
        return any(m.id == message_id for m in self.messages)
