"""Exception taxonomy for the client core."""


class DocChatError(Exception):
    """Base class for all client core errors."""

    pass


class NotFoundError(DocChatError):
    """Raised when a Document or ChatSession reference does not resolve."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} '{entity_id}' not found")


class DuplicateIdError(DocChatError):
    """Raised when an id is already taken in its scope."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} id '{entity_id}' already exists")


class ValidationError(DocChatError):
    """Raised for out-of-range page/zoom requests or malformed citations.

    Always handled locally by clamping or ignoring the request.
    """

    pass


class InvalidTransitionError(DocChatError):
    """Raised when a screen transition is not allowed from the current screen."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"Cannot navigate from '{source}' to '{target}'")


class TransportError(DocChatError):
    """Raised when a backend call fails or returns success=false."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PersistenceError(DocChatError):
    """Raised when a snapshot cannot be encoded, decoded or stored."""

    pass
