"""Request and response models for the document-processing/chat backend."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from docchat.errors import TransportError

T = TypeVar("T")


class UploadResponse(BaseModel):
    """Response of the upload endpoint."""

    success: bool
    session_id: str = ""
    file_name: str = ""
    total_pages: int = Field(default=0, ge=0, description="Page count, 0 if unknown")
    images_processed: int | None = None
    error: str | None = None


class ChatRequest(BaseModel):
    """Body of a chat request."""

    session_id: str
    message: str


class Source(BaseModel):
    """Backend source excerpt for an answer."""

    page: int
    content: str


class ChatResponse(BaseModel):
    """Response of the chat endpoint.

    Older backends return the text under ``response`` instead of ``answer``.
    """

    success: bool
    answer: str | None = None
    response: str | None = None
    citations: list[int] = Field(default_factory=list)
    sources: list[Source] = Field(default_factory=list)
    error: str | None = None

    @property
    def text(self) -> str | None:
        """Answer text, whichever field carried it."""
        return self.answer or self.response


class AckResponse(BaseModel):
    """Bare acknowledgement returned by delete and clear endpoints."""

    success: bool
    error: str | None = None


class SessionInfo(BaseModel):
    """A document session known to the backend."""

    session_id: str
    file_name: str = ""
    created_at: str | None = None
    message_count: int = Field(default=0, ge=0)
    document_id: str | None = None


class SessionsResponse(BaseModel):
    """Response of the session listing endpoint."""

    success: bool
    sessions: list[SessionInfo] = Field(default_factory=list)
    error: str | None = None


class ImageSearchRequest(BaseModel):
    """Body of an image search request."""

    query: str = Field(min_length=1)
    limit: int = Field(default=10, ge=1, le=100)


class ImageSearchResult(BaseModel):
    """An extracted image matching a search query."""

    image_id: str
    document_id: str
    document_name: str = ""
    page_number: int = Field(ge=1)
    description: str = ""
    image_type: str = ""
    thumbnail_base64: str | None = None
    score: float = 0.0


class ImageSearchResponse(BaseModel):
    """Response of the image search endpoint."""

    success: bool
    results: list[ImageSearchResult] = Field(default_factory=list)
    query: str | None = None
    total_results: int = Field(default=0, ge=0)
    error: str | None = None


class DocumentInfoResponse(BaseModel):
    """Response of the document-info endpoint."""

    success: bool
    total_pages: int | None = None
    error: str | None = None


@dataclass(frozen=True)
class Completion(Generic[T]):
    """Outcome of an asynchronous backend call.

    Exactly one of ``value`` and ``error`` is set.
    """

    value: T | None = None
    error: TransportError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Completion[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TransportError) -> "Completion[T]":
        return cls(error=error)
