"""Workspace service: the single event path that mutates client state."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from docchat.clients.backend_client import BackendClient
from docchat.errors import NotFoundError, TransportError
from docchat.logging_config import event_scope
from docchat.models.backend import (
    ChatResponse,
    Completion,
    DocumentInfoResponse,
    ImageSearchResult,
    SessionInfo,
    UploadResponse,
)
from docchat.models.chat import ChatSession, Message, RelatedDocument, Role
from docchat.models.document import Document, format_file_size
from docchat.models.navigation import NavigationState, Screen
from docchat.models.snapshot import Snapshot
from docchat.parsers.citation_parser import Segment, TextSegment, parse_citations
from docchat.services.navigation import NavigationStateMachine
from docchat.storage.entity_store import EntityStore, StoreEvent, StoreEventKind
from docchat.storage.key_value import InMemoryKeyValueStore
from docchat.storage.persistence import PersistenceGateway
from docchat.viewer.pagination import PaginationController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CitationClick:
    """Result of following a page citation.

    Attributes:
        page: Requested page
        document_id: Document whose view handled the click (None if no view)
        applied: Whether the view moved to the page
        revealed: Whether the view was hidden and has been asked to show
    """

    page: int
    document_id: str | None
    applied: bool
    revealed: bool = False


class WorkspaceService:
    """Owns the client state and applies user actions and backend completions.

    This is the only writer of the entity store and navigation state. Every
    mutation is followed by a snapshot through the persistence gateway.
    Backend completions are checked against the store before they are
    applied: a completion for a document or session deleted in the meantime
    is discarded.
    """

    def __init__(
        self,
        client: BackendClient,
        store: EntityStore | None = None,
        gateway: PersistenceGateway | None = None,
    ):
        """Initialize workspace service.

        Args:
            client: Backend client
            store: Entity store (creates empty one if None)
            gateway: Persistence gateway (creates in-memory one if None)
        """
        self.client = client
        self.store = store or EntityStore()
        self.gateway = gateway or PersistenceGateway(InMemoryKeyValueStore())
        self.navigation = NavigationStateMachine(self.store)
        self._views: dict[str, PaginationController] = {}
        self._restoring = False

        self.store.subscribe(self._on_store_event)
        self.navigation.subscribe(self._on_navigation_change)

    # State and persistence

    def snapshot(self) -> Snapshot:
        """Capture documents, sessions and navigation."""
        snapshot = self.store.snapshot()
        snapshot.navigation = self.navigation.state
        return snapshot

    def persist(self) -> bool:
        """Save the current snapshot. Failures are logged, never raised."""
        return self.gateway.save(self.snapshot())

    def restore(self) -> Snapshot:
        """Rehydrate state from the persisted snapshot.

        Returns:
            The snapshot that was loaded (empty if nothing usable was stored)
        """
        with event_scope("restore"):
            snapshot = self.gateway.load()
            self._restoring = True
            try:
                self._views.clear()
                self.store.restore(snapshot)
                self.navigation.restore(snapshot.navigation)
            finally:
                self._restoring = False
            self.persist()
            return snapshot

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.kind is StoreEventKind.DOCUMENT_DELETED:
            self._views.pop(event.document_id, None)
        if not self._restoring:
            self.persist()

    def _on_navigation_change(self, state: NavigationState) -> None:
        if not self._restoring:
            self.persist()

    # Navigation

    def go_home(self) -> NavigationState:
        with event_scope("go_home"):
            return self.navigation.go_home()

    def go_to_library(self) -> NavigationState:
        with event_scope("go_to_library"):
            return self.navigation.go_to_library()

    def view_document(self, document_id: str) -> PaginationController:
        """Open the viewer for a document.

        Returns:
            The pagination controller of the document view

        Raises:
            NotFoundError: If the document does not exist
        """
        with event_scope("view_document"):
            self.navigation.view_document(document_id)
            return self.view_for(document_id)

    def create_chatbot(self, document_id: str, reuse_existing: bool = False) -> str:
        """Create a chatbot for a document and open it.

        Raises:
            NotFoundError: If the document does not exist (nothing changes)
        """
        with event_scope("create_chatbot"):
            return self.navigation.create_chatbot_for(document_id, reuse_existing)

    def open_chatbot(self, chatbot_id: str) -> NavigationState:
        with event_scope("open_chatbot"):
            return self.navigation.open_chatbot(chatbot_id)

    # Documents

    def delete_document(self, document_id: str) -> bool:
        """Delete a document and its chatbots."""
        with event_scope("delete_document"):
            return self.store.delete_document(document_id)

    def delete_chatbot(self, chatbot_id: str) -> bool:
        with event_scope("delete_chatbot"):
            return self.store.delete_session(chatbot_id)

    def search_documents(self, query: str) -> list[Document]:
        return self.store.search_documents(query)

    async def remove_document(self, document_id: str) -> bool:
        """Delete a document here and its session on the backend.

        The local delete happens first, so the document is gone even if the
        backend cannot be reached.

        Returns:
            True if the document existed locally
        """
        with event_scope("remove_document"):
            existed = self.store.delete_document(document_id)
            completion = await self.client.delete_session(document_id)
            if not completion.ok:
                logger.warning(
                    f"Backend session {document_id} was not deleted: {completion.error}"
                )
            return existed

    async def backend_sessions(self) -> list[SessionInfo]:
        """Sessions the backend holds, or an empty list if it cannot say."""
        with event_scope("backend_sessions"):
            completion = await self.client.list_sessions()
            if not completion.ok:
                logger.warning(f"Could not list backend sessions: {completion.error}")
                return []
            return completion.value.sessions

    async def search_images(self, query: str, limit: int = 10) -> list[ImageSearchResult]:
        """Search images across uploaded documents.

        Blank queries return nothing without contacting the backend. Results
        for documents this workspace does not know are dropped.
        """
        with event_scope("search_images"):
            if not query.strip():
                return []
            completion = await self.client.search_images(query, limit)
            if not completion.ok:
                logger.warning(f"Image search failed: {completion.error}")
                return []
            return [
                result
                for result in completion.value.results
                if self.store.has_document(result.document_id)
            ]

    async def upload_document(
        self,
        file_name: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        content: str = "",
    ) -> Document | None:
        """Upload a file and register the resulting document.

        Args:
            file_name: Original file name
            data: File content
            content_type: MIME type of the file
            content: Text kept with the document for search and page hints

        Returns:
            The new document, or None if the upload failed
        """
        with event_scope("upload_document"):
            completion = await self.client.upload(file_name, data, content_type)
            return self.apply_upload(completion, file_name, len(data), content)

    def apply_upload(
        self,
        completion: Completion[UploadResponse],
        file_name: str,
        size: int,
        content: str = "",
    ) -> Document | None:
        """Create a document from an upload completion.

        Raises:
            DuplicateIdError: If the backend returned an id already in use
        """
        if not completion.ok:
            logger.warning(f"Upload of {file_name} failed: {completion.error}")
            return None

        response = completion.value
        if not response.session_id:
            logger.warning(f"Upload of {file_name} returned no session id")
            return None

        document = Document(
            id=response.session_id,
            name=response.file_name or file_name,
            uploaded_at=datetime.now(UTC),
            size_label=format_file_size(size),
            content=content,
            page_count=max(1, response.total_pages),
            page_count_authoritative=response.total_pages >= 1,
        )
        return self.store.add_document(document)

    # Document views

    def view_for(self, document_id: str) -> PaginationController:
        """Get (or create) the pagination controller of a document view.

        Raises:
            NotFoundError: If the document does not exist
        """
        document = self.store.get_document(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        view = self._views.get(document_id)
        if view is None:
            view = PaginationController(
                document_id,
                page_count=document.page_count,
                authoritative=document.page_count_authoritative,
            )
            self._views[document_id] = view
        return view

    async def refresh_page_count(self, document_id: str) -> PaginationController | None:
        """Fetch the authoritative page count of a document.

        Returns:
            The updated view, or None if the document is gone
        """
        with event_scope("refresh_page_count"):
            completion = await self.client.get_document_info(document_id)
            return self.apply_document_info(document_id, completion)

    def apply_document_info(
        self,
        document_id: str,
        completion: Completion[DocumentInfoResponse],
    ) -> PaginationController | None:
        """Apply a document-info completion to the document view.

        On failure the view falls back to a page-count hint found in the
        document content.
        """
        document = self.store.get_document(document_id)
        if document is None:
            logger.info(f"Discarding document info for deleted document {document_id}")
            return None

        view = self.view_for(document_id)
        if completion.ok:
            page_count = completion.value.total_pages or 1
            self.store.update_page_count(document_id, page_count)
            view.set_page_count(page_count)
        else:
            logger.warning(f"Failed to load document info for {document_id}: {completion.error}")
            view.apply_page_hint(document.content)
        return view

    def page_image_url(self, document_id: str) -> str:
        """URL of the current page image of a document view.

        Raises:
            NotFoundError: If the document does not exist
        """
        view = self.view_for(document_id)
        return self.client.page_image_url(document_id, view.current_page)

    # Chat

    def active_chatbot(self) -> ChatSession | None:
        state = self.navigation.state
        if state.screen is not Screen.CHATBOT:
            return None
        return self.store.get_session(state.selected_chatbot_id)

    def _new_message(self, role: Role, content: str, **kwargs) -> Message:
        return Message(
            id=self.store.id_generator.next_id("msg"),
            role=role,
            content=content,
            **kwargs,
        )

    async def send_message(self, chatbot_id: str, text: str) -> Message | None:
        """Send a user message and append the assistant's reply.

        The user message is appended before the backend is asked. If the
        chatbot is deleted while the request is pending, the reply is dropped.

        Args:
            chatbot_id: Chat session id
            text: User message

        Returns:
            The appended assistant message, or None if nothing was appended

        Raises:
            NotFoundError: If the chat session does not exist
        """
        with event_scope("send_message"):
            if not text.strip():
                return None

            session = self.store.get_session(chatbot_id)
            if session is None:
                raise NotFoundError("ChatSession", chatbot_id)

            self.store.append_message(chatbot_id, self._new_message(Role.USER, text))
            completion = await self.client.send_chat(session.document_id, text)
            return self.apply_chat_response(chatbot_id, completion)

    def apply_chat_response(
        self,
        chatbot_id: str,
        completion: Completion[ChatResponse],
    ) -> Message | None:
        """Append the assistant message for a chat completion.

        Failed completions become an assistant message describing the error.

        Returns:
            The appended message, or None if the session no longer exists
        """
        session = self.store.get_session(chatbot_id)
        if session is None:
            logger.info(f"Discarding chat response for deleted chatbot {chatbot_id}")
            return None

        if completion.ok and not completion.value.text:
            completion = Completion.failure(TransportError("Chat failed: Failed to get response"))

        if not completion.ok:
            logger.warning(f"Chat request for {chatbot_id} failed: {completion.error}")
            message = self._new_message(Role.ASSISTANT, f"Error: {completion.error}")
        else:
            response = completion.value
            related = tuple(
                RelatedDocument(
                    document_id=session.document_id,
                    document_name=session.document_name,
                    page=page,
                )
                for page in dict.fromkeys(response.citations)
                if page >= 1
            )
            message = self._new_message(
                Role.ASSISTANT,
                response.text,
                related_documents=related or None,
            )
        return self.store.append_message(chatbot_id, message)

    async def clear_chatbot(self, chatbot_id: str) -> ChatSession:
        """Empty a chatbot's conversation and reset the backend history.

        The backend keeps one history per document, so its reset also
        affects other chatbots of the same document.

        Raises:
            NotFoundError: If the chat session does not exist
        """
        with event_scope("clear_chatbot"):
            session = self.store.clear_chatbot(chatbot_id)
            completion = await self.client.clear_history(session.document_id)
            if not completion.ok:
                logger.warning(
                    f"Backend history for {session.document_id} was not cleared: "
                    f"{completion.error}"
                )
            return self.store.get_session(chatbot_id) or session

    def render_message(self, message: Message) -> list[Segment]:
        """Split a message into text and clickable citation segments."""
        if message.role is Role.ASSISTANT:
            return parse_citations(message.content)
        return [TextSegment(message.content)] if message.content else []

    def follow_citation(self, page: int) -> CitationClick:
        """Jump the document view of the current screen to a cited page.

        Out-of-range pages are ignored. On the chatbot screen a collapsed
        document panel is expanded so the page becomes visible.
        """
        with event_scope("follow_citation"):
            state = self.navigation.state
            document_id = state.selected_document_id
            if state.screen not in (Screen.VIEWER, Screen.CHATBOT) or document_id is None:
                return CitationClick(page=page, document_id=None, applied=False)

            view = self.view_for(document_id)
            if not view.jump_to_page(page):
                return CitationClick(page=page, document_id=document_id, applied=False)

            revealed = False
            if state.screen is Screen.CHATBOT and not view.is_expanded:
                view.expand()
                revealed = True
            return CitationClick(
                page=page,
                document_id=document_id,
                applied=True,
                revealed=revealed,
            )
