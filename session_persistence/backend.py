"""Session persistence backends."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Protocol, runtime_checkable

from . import events
from .errors import SessionSerializationError
from .resolver import ClassResolver

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def to_epoch_millis(value: datetime) -> int:
    return (_normalize_expiration(value) - EPOCH) // _ONE_MS


def from_epoch_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


def _normalize_expiration(value: datetime) -> datetime:
    # Naive datetimes are local time; stored precision is milliseconds.
    if value.tzinfo is None:
        value = value.astimezone()
    value = value.astimezone(timezone.utc)
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


@dataclass
class PersistentSession:
    """One persisted session: when it expires and its attributes."""

    expiration: datetime
    session_data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.expiration = _normalize_expiration(self.expiration)

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return self.expiration <= now


def discard_expired(
    sessions: Mapping[str, PersistentSession],
    now: datetime | None = None,
) -> dict[str, PersistentSession]:
    """Return the sessions whose expiration is strictly after ``now``."""
    now = now or datetime.now(timezone.utc)
    return {sid: s for sid, s in sessions.items() if not s.is_expired(now)}


@runtime_checkable
class SessionPersistence(Protocol):
    """Protocol for storing a session manager's sessions across restarts."""

    def persist_sessions(
        self, domain: str, sessions: Mapping[str, PersistentSession]
    ) -> None:
        """Replace everything stored for ``domain`` with ``sessions``."""
        ...

    def load_session_attributes(
        self, domain: str, resolver: ClassResolver | None = None
    ) -> dict[str, PersistentSession] | None:
        """Load unexpired sessions. Returns None if nothing was persisted."""
        ...

    def clear(self, domain: str) -> None:
        """Forget ``domain``. Clearing an unknown domain is not an error."""
        ...


class InMemorySessionPersistence:
    """In-memory persistence for development/testing.

    Sessions survive a session manager being stopped and started again
    within one process, but not a process restart.
    """

    def __init__(self) -> None:
        self._store: dict[str, dict[str, PersistentSession]] = {}

    def persist_sessions(
        self, domain: str, sessions: Mapping[str, PersistentSession]
    ) -> None:
        try:
            self._store[domain] = copy.deepcopy(dict(sessions))
        except (TypeError, copy.Error) as e:
            raise SessionSerializationError(
                f"Cannot copy sessions for domain {domain!r}"
            ) from e
        events.persisted(domain, count=len(sessions), backend="memory")

    def load_session_attributes(
        self, domain: str, resolver: ClassResolver | None = None
    ) -> dict[str, PersistentSession] | None:
        stored = self._store.get(domain)
        if stored is None:
            return None
        restored = discard_expired(copy.deepcopy(stored))
        events.loaded(
            domain,
            restored=len(restored),
            discarded=len(stored) - len(restored),
            backend="memory",
        )
        return restored

    def clear(self, domain: str) -> None:
        if self._store.pop(domain, None) is not None:
            events.cleared(domain, backend="memory")
