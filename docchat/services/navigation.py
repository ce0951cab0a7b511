"""Screen navigation state machine."""

import logging
from collections.abc import Callable

from docchat.errors import InvalidTransitionError, NotFoundError
from docchat.models.navigation import NavigationState, Screen
from docchat.storage.entity_store import EntityStore, StoreEvent, StoreEventKind

logger = logging.getLogger(__name__)

NavigationObserver = Callable[[NavigationState], None]

# Screens a transition may start from
VIEWER_SOURCES = frozenset({Screen.HOME, Screen.LIBRARY, Screen.CHATBOT})
CHATBOT_SOURCES = frozenset({Screen.HOME, Screen.LIBRARY, Screen.VIEWER})

HOME = NavigationState()


class NavigationStateMachine:
    """Top-level screen state validated against the entity store.

    States are Home, Library, Viewer(document) and Chatbot(session). Every
    transition into Viewer or Chatbot is all-or-nothing: on failure the
    previous state stays in place. If a referenced entity disappears, the
    machine falls back to Home.
    """

    def __init__(self, store: EntityStore, initial: NavigationState | None = None):
        """Initialize state machine.

        Args:
            store: Entity store used to validate references
            initial: Starting state (e.g. from a snapshot); Home if None
        """
        self.store = store
        self._state = initial or HOME
        self._observers: list[NavigationObserver] = []
        self._unsubscribe = store.subscribe(self._on_store_event)
        self.reconcile()

    @property
    def state(self) -> NavigationState:
        """Current state, reconciled against the store."""
        self.reconcile()
        return self._state

    @property
    def screen(self) -> Screen:
        return self.state.screen

    def subscribe(self, observer: NavigationObserver) -> Callable[[], None]:
        """Register an observer called after every state change.

        Returns:
            Callable that removes the observer
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def close(self) -> None:
        """Stop listening to store events."""
        self._unsubscribe()

    def _set_state(self, new_state: NavigationState) -> None:
        if new_state == self._state:
            return
        old_screen = self._state.screen
        self._state = new_state
        logger.info(f"Navigation: {old_screen.value} -> {new_state.screen.value}")
        for observer in list(self._observers):
            try:
                observer(new_state)
            except Exception:
                logger.exception("Navigation observer failed")

    def _is_valid(self, state: NavigationState) -> bool:
        if state.screen is Screen.VIEWER:
            return self.store.has_document(state.selected_document_id)
        if state.screen is Screen.CHATBOT:
            session = self.store.get_session(state.selected_chatbot_id or "")
            return (
                session is not None
                and session.document_id == state.selected_document_id
                and self.store.has_document(session.document_id)
            )
        return True

    def reconcile(self) -> bool:
        """Fall back to Home if the current state references a missing entity.

        Returns:
            True if the state was reset
        """
        if self._is_valid(self._state):
            return False
        logger.warning(
            f"Navigation target vanished on {self._state.screen.value} screen "
            f"(document={self._state.selected_document_id}, "
            f"chatbot={self._state.selected_chatbot_id}), returning home"
        )
        self._set_state(HOME)
        return True

    def _on_store_event(self, event: StoreEvent) -> None:
        if event.kind in (
            StoreEventKind.DOCUMENT_DELETED,
            StoreEventKind.SESSION_DELETED,
            StoreEventKind.RESTORED,
        ):
            self.reconcile()

    def _check_source(self, allowed: frozenset[Screen], target: Screen) -> None:
        current = self.state.screen
        if current not in allowed:
            raise InvalidTransitionError(current.value, target.value)

    def restore(self, state: NavigationState) -> NavigationState:
        """Adopt a previously saved state, falling back to Home if it is stale."""
        if self._is_valid(state):
            self._set_state(state)
        else:
            logger.warning(f"Saved {state.screen.value} screen is stale, starting at home")
            self._set_state(HOME)
        return self._state

    # Transitions

    def go_home(self) -> NavigationState:
        """Return to the home screen. Always succeeds."""
        self._set_state(HOME)
        return self._state

    def go_to_library(self) -> NavigationState:
        """Show the document library. Always succeeds."""
        self._set_state(NavigationState(screen=Screen.LIBRARY))
        return self._state

    def view_document(self, document_id: str) -> NavigationState:
        """Open the viewer for a document.

        Raises:
            InvalidTransitionError: If the viewer cannot be opened from here
            NotFoundError: If the document does not exist
        """
        self._check_source(VIEWER_SOURCES, Screen.VIEWER)
        if not self.store.has_document(document_id):
            raise NotFoundError("Document", document_id)
        self._set_state(
            NavigationState(screen=Screen.VIEWER, selected_document_id=document_id)
        )
        return self._state

    def open_chatbot(self, chatbot_id: str) -> NavigationState:
        """Open an existing chat session.

        Raises:
            InvalidTransitionError: If a chatbot cannot be opened from here
            NotFoundError: If the session does not exist
        """
        self._check_source(CHATBOT_SOURCES, Screen.CHATBOT)
        session = self.store.get_session(chatbot_id)
        if session is None:
            raise NotFoundError("ChatSession", chatbot_id)
        self._set_state(
            NavigationState(
                screen=Screen.CHATBOT,
                selected_document_id=session.document_id,
                selected_chatbot_id=session.id,
            )
        )
        return self._state

    def create_chatbot_for(
        self,
        document_id: str,
        reuse_existing: bool = False,
    ) -> str:
        """Create (or reuse) a chat session for a document and open it.

        Args:
            document_id: Document to chat about
            reuse_existing: Open the latest existing session instead of
                creating a new one when there is one

        Returns:
            Id of the opened session

        Raises:
            InvalidTransitionError: If a chatbot cannot be opened from here
            NotFoundError: If the document does not exist (nothing changes)
        """
        self._check_source(CHATBOT_SOURCES, Screen.CHATBOT)
        if not self.store.has_document(document_id):
            raise NotFoundError("Document", document_id)

        existing = self.store.find_session_for_document(document_id) if reuse_existing else None
        chatbot_id = existing.id if existing else self.store.create_chatbot(document_id)
        self.open_chatbot(chatbot_id)
        return chatbot_id
