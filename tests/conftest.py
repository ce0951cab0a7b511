"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from docchat.clients.backend_client import BackendClient
from docchat.models.backend import (
    AckResponse,
    Completion,
    ImageSearchResponse,
    SessionsResponse,
    UploadResponse,
)
from docchat.models.document import Document
from docchat.services.workspace_service import WorkspaceService
from docchat.storage.entity_store import EntityStore
from docchat.storage.key_value import InMemoryKeyValueStore
from docchat.storage.persistence import PersistenceGateway


@pytest.fixture
def store():
    """Empty entity store."""
    return EntityStore()


@pytest.fixture
def sample_document():
    """Twelve-page document as created after a successful upload."""
    return Document(
        id="doc-1",
        name="report.pdf",
        size_label="1.50 MB",
        content="Quarterly report, 12 pages",
        page_count=12,
    )


@pytest.fixture
def kv_store():
    """In-memory durable storage."""
    return InMemoryKeyValueStore()


@pytest.fixture
def mock_client():
    """Backend client with async calls mocked out."""
    client = MagicMock(spec=BackendClient)
    client.upload = AsyncMock()
    client.send_chat = AsyncMock()
    client.get_document_info = AsyncMock()
    client.delete_session = AsyncMock(return_value=Completion.success(AckResponse(success=True)))
    client.clear_history = AsyncMock(return_value=Completion.success(AckResponse(success=True)))
    client.list_sessions = AsyncMock(
        return_value=Completion.success(SessionsResponse(success=True))
    )
    client.search_images = AsyncMock(
        return_value=Completion.success(ImageSearchResponse(success=True))
    )
    client.page_image_url = MagicMock(
        side_effect=lambda session_id, page: f"http://backend/api/page-image/{session_id}/{page}"
    )
    return client


@pytest.fixture
def workspace(mock_client, kv_store):
    """Workspace service over mocked backend and in-memory storage."""
    return WorkspaceService(
        client=mock_client,
        store=EntityStore(),
        gateway=PersistenceGateway(kv_store, key="test-state"),
    )


@pytest.fixture
def upload_document(workspace, mock_client):
    """Upload a document through the workspace with a mocked backend reply."""

    async def _upload(doc_id="doc-1", file_name="report.pdf", pages=12, content=""):
        mock_client.upload.return_value = Completion.success(
            UploadResponse(
                success=True,
                session_id=doc_id,
                file_name=file_name,
                total_pages=pages,
            )
        )
        return await workspace.upload_document(
            file_name, b"%PDF-1.4 test content", "application/pdf", content=content
        )

    return _upload
