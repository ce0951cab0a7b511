"""Serialized form of the workspace state."""

from pydantic import BaseModel, Field

from docchat.models.chat import ChatSession
from docchat.models.document import Document
from docchat.models.navigation import NavigationState

SNAPSHOT_VERSION = 1


class Snapshot(BaseModel):
    """Documents, chat sessions and navigation at one point in time.

    Every field has a default so an empty or partial payload still loads.
    """

    version: int = SNAPSHOT_VERSION
    documents: list[Document] = Field(default_factory=list)
    sessions: list[ChatSession] = Field(default_factory=list)
    navigation: NavigationState = Field(default_factory=NavigationState)

    @property
    def is_empty(self) -> bool:
        """True when nothing beyond the baseline is recorded."""
        return not self.documents and not self.sessions
