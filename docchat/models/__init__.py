"""Pydantic models for the document chat client."""

from docchat.models.backend import (
    AckResponse,
    ChatRequest,
    ChatResponse,
    Completion,
    DocumentInfoResponse,
    ImageSearchRequest,
    ImageSearchResponse,
    ImageSearchResult,
    SessionInfo,
    SessionsResponse,
    Source,
    UploadResponse,
)
from docchat.models.chat import ChatSession, Message, RelatedDocument, Role
from docchat.models.document import Document, format_file_size
from docchat.models.navigation import NavigationState, Screen, ViewState
from docchat.models.snapshot import Snapshot

__all__ = [
    # Entity models
    "Document",
    "ChatSession",
    "Message",
    "RelatedDocument",
    "Role",
    "format_file_size",
    # State models
    "NavigationState",
    "Screen",
    "ViewState",
    "Snapshot",
    # Backend models
    "AckResponse",
    "ChatRequest",
    "ChatResponse",
    "Completion",
    "DocumentInfoResponse",
    "ImageSearchRequest",
    "ImageSearchResponse",
    "ImageSearchResult",
    "SessionInfo",
    "SessionsResponse",
    "Source",
    "UploadResponse",
]
