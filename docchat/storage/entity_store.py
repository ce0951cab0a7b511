"""In-memory store of documents, chat sessions and messages."""

import itertools
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from docchat.errors import DuplicateIdError, NotFoundError
from docchat.models.chat import ChatSession, Message
from docchat.models.document import Document
from docchat.models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class StoreEventKind(str, Enum):
    """Kinds of store mutations reported to observers."""

    DOCUMENT_ADDED = "document_added"
    DOCUMENT_UPDATED = "document_updated"
    DOCUMENT_DELETED = "document_deleted"
    SESSION_CREATED = "session_created"
    SESSION_DELETED = "session_deleted"
    MESSAGE_APPENDED = "message_appended"
    MESSAGES_CLEARED = "messages_cleared"
    RESTORED = "restored"


@dataclass(frozen=True)
class StoreEvent:
    """A single store mutation.

    For ``message_appended`` only the new tail message is carried, so
    observers can render incrementally.
    """

    kind: StoreEventKind
    document_id: str | None = None
    session_id: str | None = None
    message: Message | None = None


StoreObserver = Callable[[StoreEvent], None]


class IdGenerator:
    """Generates ids from a monotonic counter plus a random suffix.

    Ids look like ``chatbot-3-9f2a1c``. Uniqueness is still checked by the
    store on every insert.
    """

    def __init__(self, suffix_bytes: int = 3):
        self._counter = itertools.count(1)
        self._suffix_bytes = suffix_bytes

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counter)}-{secrets.token_hex(self._suffix_bytes)}"


class EntityStore:
    """Owns documents, chat sessions and their messages.

    Invariants kept after every mutation:
    - every session references a live document
    - message ids are unique within a session
    - messages are append-only; only ``clear_chatbot`` removes them, all at once

    Entities are frozen models, so reads hand out the stored objects directly.
    """

    def __init__(self, id_generator: IdGenerator | None = None):
        """Initialize an empty store.

        Args:
            id_generator: Source of session ids (creates default if None)
        """
        self.id_generator = id_generator or IdGenerator()
        self._documents: dict[str, Document] = {}
        self._sessions: dict[str, ChatSession] = {}
        self._observers: list[StoreObserver] = []

    # Observers

    def subscribe(self, observer: StoreObserver) -> Callable[[], None]:
        """Register an observer for store events.

        Returns:
            Callable that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception(f"Store observer failed on {event.kind.value}")

    # Documents

    def add_document(self, document: Document) -> Document:
        """Insert a document.

        Raises:
            DuplicateIdError: If a document with the same id exists
        """
        if document.id in self._documents:
            raise DuplicateIdError("Document", document.id)
        self._documents[document.id] = document
        logger.info(f"Added document {document.id} ({document.name})")
        self._notify(StoreEvent(StoreEventKind.DOCUMENT_ADDED, document_id=document.id))
        return document

    def delete_document(self, document_id: str) -> bool:
        """Remove a document and every session that references it.

        Returns:
            True if the document existed, False otherwise
        """
        if document_id not in self._documents:
            return False

        dependent = [s.id for s in self._sessions.values() if s.document_id == document_id]
        for session_id in dependent:
            del self._sessions[session_id]
        del self._documents[document_id]

        logger.info(
            f"Deleted document {document_id} and {len(dependent)} dependent session(s)"
        )
        for session_id in dependent:
            self._notify(
                StoreEvent(
                    StoreEventKind.SESSION_DELETED,
                    document_id=document_id,
                    session_id=session_id,
                )
            )
        self._notify(StoreEvent(StoreEventKind.DOCUMENT_DELETED, document_id=document_id))
        return True

    def update_page_count(self, document_id: str, page_count: int) -> Document:
        """Record the authoritative page count of a document.

        Raises:
            NotFoundError: If the document does not exist
        """
        document = self._documents.get(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)
        page_count = max(1, page_count)
        if document.page_count == page_count and document.page_count_authoritative:
            return document
        updated = document.model_copy(
            update={"page_count": page_count, "page_count_authoritative": True}
        )
        self._documents[document_id] = updated
        self._notify(StoreEvent(StoreEventKind.DOCUMENT_UPDATED, document_id=document_id))
        return updated

    def get_document(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def has_document(self, document_id: str | None) -> bool:
        return document_id is not None and document_id in self._documents

    def list_documents(self) -> list[Document]:
        """Documents in upload order."""
        return list(self._documents.values())

    def search_documents(self, query: str) -> list[Document]:
        """Case-insensitive substring search over document names and content."""
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            doc
            for doc in self._documents.values()
            if needle in doc.name.lower() or needle in doc.content.lower()
        ]

    # Sessions

    def create_chatbot(self, document_id: str) -> str:
        """Create a chat session for a document.

        Args:
            document_id: Document the session is about

        Returns:
            Id of the new session

        Raises:
            NotFoundError: If the document does not exist (store unchanged)
            DuplicateIdError: If the generated id is already taken (store unchanged)
        """
        document = self._documents.get(document_id)
        if document is None:
            raise NotFoundError("Document", document_id)

        session_id = self.id_generator.next_id("chatbot")
        if session_id in self._sessions:
            raise DuplicateIdError("ChatSession", session_id)

        self._sessions[session_id] = ChatSession(
            id=session_id,
            document_id=document_id,
            document_name=document.name,
        )
        logger.info(f"Created chatbot {session_id} for document {document_id}")
        self._notify(
            StoreEvent(
                StoreEventKind.SESSION_CREATED,
                document_id=document_id,
                session_id=session_id,
            )
        )
        return session_id

    def delete_session(self, session_id: str) -> bool:
        """Remove a chat session.

        Returns:
            True if the session existed, False otherwise
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        logger.info(f"Deleted chatbot {session_id}")
        self._notify(
            StoreEvent(
                StoreEventKind.SESSION_DELETED,
                document_id=session.document_id,
                session_id=session_id,
            )
        )
        return True

    def get_session(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def has_session(self, session_id: str | None) -> bool:
        return session_id is not None and session_id in self._sessions

    def list_sessions(self, document_id: str | None = None) -> list[ChatSession]:
        """Sessions in creation order, optionally for one document only."""
        return [
            s
            for s in self._sessions.values()
            if document_id is None or s.document_id == document_id
        ]

    def find_session_for_document(self, document_id: str) -> ChatSession | None:
        """Most recently created session for a document, if any."""
        sessions = self.list_sessions(document_id)
        return sessions[-1] if sessions else None

    def append_message(self, session_id: str, message: Message) -> Message:
        """Append a message to a session.

        Observers receive an event carrying only the appended message.

        Raises:
            NotFoundError: If the session does not exist
            DuplicateIdError: If the message id is already used in the session
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("ChatSession", session_id)
        if session.has_message(message.id):
            raise DuplicateIdError("Message", message.id)

        self._sessions[session_id] = session.model_copy(
            update={"messages": session.messages + (message,)}
        )
        logger.debug(f"Appended {message.role.value} message {message.id} to {session_id}")
        self._notify(
            StoreEvent(
                StoreEventKind.MESSAGE_APPENDED,
                document_id=session.document_id,
                session_id=session_id,
                message=message,
            )
        )
        return message

    def clear_chatbot(self, session_id: str) -> ChatSession:
        """Remove every message of a session, keeping the session itself.

        Returns:
            The emptied session

        Raises:
            NotFoundError: If the session does not exist
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError("ChatSession", session_id)

        cleared = session.model_copy(update={"messages": ()})
        self._sessions[session_id] = cleared
        logger.info(f"Cleared {len(session.messages)} message(s) from {session_id}")
        self._notify(
            StoreEvent(
                StoreEventKind.MESSAGES_CLEARED,
                document_id=session.document_id,
                session_id=session_id,
            )
        )
        return cleared

    # Serialization

    def snapshot(self) -> Snapshot:
        """Capture all documents and sessions (navigation is left at its default)."""
        return Snapshot(
            documents=self.list_documents(),
            sessions=self.list_sessions(),
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the store contents with a snapshot.

        Entries that would break the store invariants (duplicate ids, sessions
        of missing documents, duplicate message ids) are dropped and logged.
        """
        documents: dict[str, Document] = {}
        for document in snapshot.documents:
            if document.id in documents:
                logger.warning(f"Dropping duplicate document {document.id} from snapshot")
                continue
            documents[document.id] = document

        sessions: dict[str, ChatSession] = {}
        for session in snapshot.sessions:
            if session.id in sessions:
                logger.warning(f"Dropping duplicate chatbot {session.id} from snapshot")
                continue
            if session.document_id not in documents:
                logger.warning(
                    f"Dropping chatbot {session.id}: document {session.document_id} missing"
                )
                continue
            seen: set[str] = set()
            messages = []
            for message in session.messages:
                if message.id in seen:
                    logger.warning(
                        f"Dropping duplicate message {message.id} from chatbot {session.id}"
                    )
                    continue
                seen.add(message.id)
                messages.append(message)
            sessions[session.id] = session.model_copy(update={"messages": tuple(messages)})

        self._documents = documents
        self._sessions = sessions
        logger.info(f"Restored {len(documents)} document(s) and {len(sessions)} chatbot(s)")
        self._notify(StoreEvent(StoreEventKind.RESTORED))
