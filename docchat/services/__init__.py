"""Service layer for navigation and workspace state."""

from docchat.services.navigation import NavigationStateMachine
from docchat.services.workspace_service import CitationClick, WorkspaceService

__all__ = [
    "CitationClick",
    "NavigationStateMachine",
    "WorkspaceService",
]
