"""Composition root wiring the workspace from settings."""

import logging

from docchat.clients.backend_client import BackendClient
from docchat.config import Settings, get_settings
from docchat.logging_config import setup_logging
from docchat.services.workspace_service import WorkspaceService
from docchat.storage.entity_store import EntityStore
from docchat.storage.key_value import FileKeyValueStore, KeyValueStore
from docchat.storage.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


def create_workspace(
    settings: Settings | None = None,
    client: BackendClient | None = None,
    kv_store: KeyValueStore | None = None,
    configure_logging: bool = False,
) -> WorkspaceService:
    """Build a workspace and rehydrate it from the last saved snapshot.

    Args:
        settings: Client settings (global settings if None)
        client: Backend client (built from settings if None)
        kv_store: Durable storage (file store under ``state_dir`` if None)
        configure_logging: Install the console log handler first

    Returns:
        Ready-to-use workspace service
    """
    if configure_logging:
        setup_logging()
    settings = settings or get_settings()

    client = client or BackendClient(
        base_url=settings.api_base_url,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )
    kv_store = kv_store or FileKeyValueStore(settings.state_dir)
    gateway = PersistenceGateway(kv_store, key=settings.snapshot_key)

    workspace = WorkspaceService(client=client, store=EntityStore(), gateway=gateway)
    workspace.restore()

    logger.info(
        f"Workspace ready: {len(workspace.store.list_documents())} document(s), "
        f"backend at {settings.api_base_url}"
    )
    return workspace
