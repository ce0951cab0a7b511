"""Snapshot persistence for the workspace state."""

import logging

from pydantic import ValidationError as ModelValidationError

from docchat.errors import PersistenceError
from docchat.models.snapshot import Snapshot
from docchat.storage.key_value import KeyValueStore

logger = logging.getLogger(__name__)


class PersistenceGateway:
    """Saves and loads workspace snapshots through a key-value store.

    Durability is best-effort: ``save`` never raises and ``load`` always
    returns a usable snapshot, falling back to an empty one.
    """

    def __init__(self, store: KeyValueStore, key: str = "docchat-state"):
        """Initialize gateway.

        Args:
            store: Durable key-value store
            key: Key under which the snapshot is kept
        """
        self.store = store
        self.key = key
        self.last_error: PersistenceError | None = None

    def encode(self, snapshot: Snapshot) -> str:
        """Serialize a snapshot to JSON text.

        Raises:
            PersistenceError: If the snapshot cannot be serialized
        """
        try:
            return snapshot.model_dump_json()
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to encode snapshot: {e}") from e

    def decode(self, raw: str) -> Snapshot:
        """Deserialize JSON text into a snapshot.

        Missing fields take the model defaults.

        Raises:
            PersistenceError: If the text is not a valid snapshot
        """
        try:
            return Snapshot.model_validate_json(raw)
        except ModelValidationError as e:
            raise PersistenceError(
                f"Failed to decode snapshot: {e.error_count()} validation error(s)"
            ) from e

    def save(self, snapshot: Snapshot) -> bool:
        """Persist a snapshot.

        Failures are logged as warnings and recorded in ``last_error``.

        Returns:
            True if the snapshot was written
        """
        try:
            payload = self.encode(snapshot)
            try:
                self.store.set(self.key, payload)
            except Exception as e:
                raise PersistenceError(f"Failed to write snapshot: {e}") from e
        except PersistenceError as e:
            self.last_error = e
            logger.warning(f"Snapshot not saved, continuing in memory only: {e}")
            return False

        self.last_error = None
        logger.debug(
            f"Saved snapshot with {len(snapshot.documents)} document(s) and "
            f"{len(snapshot.sessions)} chatbot(s)"
        )
        return True

    def load(self) -> Snapshot:
        """Load the persisted snapshot.

        Returns:
            The stored snapshot, or an empty one if nothing usable is stored
        """
        try:
            raw = self.store.get(self.key)
        except Exception as e:
            self.last_error = PersistenceError(f"Failed to read snapshot: {e}")
            logger.warning(f"{self.last_error}; starting with empty state")
            return Snapshot()

        if raw is None:
            logger.info("No saved snapshot found, starting with empty state")
            return Snapshot()

        try:
            snapshot = self.decode(raw)
        except PersistenceError as e:
            self.last_error = e
            logger.warning(f"{e}; starting with empty state")
            return Snapshot()

        logger.info(
            f"Loaded snapshot with {len(snapshot.documents)} document(s) and "
            f"{len(snapshot.sessions)} chatbot(s)"
        )
        return snapshot

    def clear(self) -> None:
        """Remove the persisted snapshot."""
        try:
            self.store.remove(self.key)
        except Exception as e:
            self.last_error = PersistenceError(f"Failed to remove snapshot: {e}")
            logger.warning(str(self.last_error))
