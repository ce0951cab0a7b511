"""Entity storage and persistence components."""

from docchat.storage.entity_store import (
    EntityStore,
    IdGenerator,
    StoreEvent,
    StoreEventKind,
)
from docchat.storage.key_value import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
)
from docchat.storage.persistence import PersistenceGateway

__all__ = [
    "EntityStore",
    "FileKeyValueStore",
    "IdGenerator",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PersistenceGateway",
    "StoreEvent",
    "StoreEventKind",
]
