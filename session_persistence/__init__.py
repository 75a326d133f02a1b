from .backend import InMemorySessionPersistence, PersistentSession, SessionPersistence
from .errors import (
    ClassResolutionError,
    SessionDataCorrupted,
    SessionPersistenceError,
    SessionSerializationError,
    SessionStorageUnavailable,
)
from .factory import create_persistence
from .file import FileSessionPersistence
from .resolver import AllowListClassResolver, ClassResolver, ImportClassResolver

__all__ = [
    "PersistentSession",
    "SessionPersistence",
    "InMemorySessionPersistence",
    "FileSessionPersistence",
    "ClassResolver",
    "ImportClassResolver",
    "AllowListClassResolver",
    "SessionPersistenceError",
    "SessionStorageUnavailable",
    "SessionDataCorrupted",
    "SessionSerializationError",
    "ClassResolutionError",
    "create_persistence",
]
