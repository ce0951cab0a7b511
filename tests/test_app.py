"""Tests for workspace wiring."""

import pytest

from docchat.app import create_workspace
from docchat.config import Settings
from docchat.models.backend import Completion, UploadResponse
from docchat.models.navigation import Screen
from docchat.storage.key_value import FileKeyValueStore


@pytest.fixture
def settings(tmp_path):
    return Settings(state_dir=tmp_path / "state", snapshot_key="workspace")


@pytest.mark.asyncio
async def test_workspace_survives_restart(settings, mock_client):
    """Test state written by one workspace is loaded by the next."""
    first = create_workspace(settings=settings, client=mock_client)
    mock_client.upload.return_value = Completion.success(
        UploadResponse(success=True, session_id="doc-1", file_name="report.pdf", total_pages=3)
    )
    await first.upload_document("report.pdf", b"data")
    chatbot_id = first.create_chatbot("doc-1")

    second = create_workspace(settings=settings, client=mock_client)

    assert [d.id for d in second.store.list_documents()] == ["doc-1"]
    assert second.navigation.screen is Screen.CHATBOT
    assert second.navigation.state.selected_chatbot_id == chatbot_id
    assert (settings.state_dir / "workspace.json").exists()


def test_workspace_with_custom_storage(settings, mock_client, tmp_path):
    """Test an explicit key-value store is used instead of state_dir."""
    kv = FileKeyValueStore(tmp_path / "elsewhere")

    workspace = create_workspace(settings=settings, client=mock_client, kv_store=kv)

    assert workspace.gateway.store is kv
    assert workspace.gateway.key == "workspace"
    assert kv.get("workspace") is not None
