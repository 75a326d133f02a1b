"""Errors raised by session persistence backends."""


class SessionPersistenceError(Exception):
    """Base class for all session persistence failures."""


class SessionStorageUnavailable(SessionPersistenceError):
    """The storage location is missing, unreadable or unwritable."""


class SessionDataCorrupted(SessionPersistenceError):
    """A session file exists but cannot be decoded."""


class SessionSerializationError(SessionPersistenceError):
    """A session attribute value cannot be serialized."""


class ClassResolutionError(SessionPersistenceError):
    """A resolver refused or failed to resolve a type referenced by session data."""
