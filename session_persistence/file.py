"""File-based session persistence.

Each session domain is stored as ``<folder>/<domain>.session``. The file is a
short header followed by a pickle of ``{session_id: (expiration_millis,
session_data)}``. Only built-in containers make up that envelope; any type
referenced by an attribute value is resolved through the caller's
:class:`~session_persistence.resolver.ClassResolver` on load.

Files are truncated and rewritten in place on every persist. There is no
locking: callers must not persist and load the same domain concurrently.
"""

from __future__ import annotations

import logging
import os
import pickle
from pathlib import Path
from typing import IO, Any, Mapping

from . import events
from .backend import PersistentSession, discard_expired, from_epoch_millis, to_epoch_millis
from .errors import (
    ClassResolutionError,
    SessionDataCorrupted,
    SessionSerializationError,
    SessionStorageUnavailable,
)
from .resolver import ClassResolver, ImportClassResolver

logger = logging.getLogger(__name__)

MAGIC = b"PYSESS"
FORMAT_VERSION = 1
SUFFIX = ".session"

_PICKLE_ERRORS = (pickle.PicklingError, TypeError, AttributeError)


class _ResolvingUnpickler(pickle.Unpickler):
    """Unpickler that looks up every global through a ClassResolver."""

    def __init__(self, file: IO[bytes], resolver: ClassResolver) -> None:
        super().__init__(file)
        self._resolver = resolver

    def find_class(self, module: str, name: str) -> Any:
        return self._resolver.resolve_class(module, name)


class FileSessionPersistence:
    """Session persistence backed by one file per session domain.

    The folder must already exist and be writable; it is never created here.
    """

    def __init__(self, folder: str | os.PathLike[str]) -> None:
        self.folder = Path(folder)

    def persist_sessions(
        self, domain: str, sessions: Mapping[str, PersistentSession]
    ) -> None:
        path = self.get_session_file(domain)
        payload = self._encode(domain, sessions)
        try:
            with path.open("wb") as f:
                f.write(MAGIC)
                f.write(bytes([FORMAT_VERSION]))
                f.write(payload)
        except OSError as e:
            logger.error("Failed to persist sessions for %s: %s", domain, e)
            raise SessionStorageUnavailable(f"Cannot write session file {path}") from e
        events.persisted(domain, count=len(sessions), backend="file", path=str(path))

    def load_session_attributes(
        self, domain: str, resolver: ClassResolver | None = None
    ) -> dict[str, PersistentSession] | None:
        path = self.get_session_file(domain)
        try:
            with path.open("rb") as f:
                stored = self._decode(f, resolver or ImportClassResolver(), path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error("Failed to load sessions for %s: %s", domain, e)
            raise SessionStorageUnavailable(f"Cannot read session file {path}") from e

        restored = discard_expired(stored)
        events.loaded(
            domain,
            restored=len(restored),
            discarded=len(stored) - len(restored),
            backend="file",
            path=str(path),
        )
        return restored

    def clear(self, domain: str) -> None:
        path = self.get_session_file(domain)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error("Failed to delete session file %s: %s", path, e)
            raise SessionStorageUnavailable(f"Cannot delete session file {path}") from e
        events.cleared(domain, backend="file", path=str(path))

    def get_session_file(self, domain: str) -> Path:
        if not domain or domain in (".", "..") or "/" in domain or os.sep in domain:
            raise ValueError(f"Invalid session domain name: {domain!r}")
        return self.folder / f"{domain}{SUFFIX}"

    # ── Encoding ───────────────────────────────────────────────────────────

    def _encode(self, domain: str, sessions: Mapping[str, PersistentSession]) -> bytes:
        # Pickle before opening the file so a bad value leaves it untouched.
        payload = {
            sid: (to_epoch_millis(s.expiration), s.session_data)
            for sid, s in sessions.items()
        }
        try:
            return pickle.dumps(payload, protocol=pickle.HIGHEST_PROTOCOL)
        except _PICKLE_ERRORS as e:
            bad = next((sid for sid, entry in payload.items() if not _picklable(entry)), None)
            logger.error("Cannot serialize session %r in %s: %s", bad, domain, e)
            raise SessionSerializationError(
                f"Cannot serialize session {bad!r} in domain {domain!r}"
            ) from e

    def _decode(
        self, f: IO[bytes], resolver: ClassResolver, path: Path
    ) -> dict[str, PersistentSession]:
        header = f.read(len(MAGIC) + 1)
        if header[: len(MAGIC)] != MAGIC or len(header) != len(MAGIC) + 1:
            raise _corrupted(path, "not a session file")
        if header[-1] != FORMAT_VERSION:
            raise _corrupted(path, f"unsupported format version {header[-1]}")

        try:
            payload = _ResolvingUnpickler(f, resolver).load()
        except ClassResolutionError as e:
            raise _corrupted(path, str(e)) from e
        except Exception as e:
            # Damaged bytes can surface as almost any error from the unpickler.
            raise _corrupted(path, f"undecodable payload ({e})") from e

        if not isinstance(payload, dict):
            raise _corrupted(path, "payload is not a mapping")

        sessions: dict[str, PersistentSession] = {}
        for sid, entry in payload.items():
            if not (
                isinstance(sid, str)
                and isinstance(entry, tuple)
                and len(entry) == 2
                and isinstance(entry[0], int)
                and isinstance(entry[1], dict)
            ):
                raise _corrupted(path, f"malformed entry for session {sid!r}")
            millis, data = entry
            try:
                sessions[sid] = PersistentSession(from_epoch_millis(millis), data)
            except OverflowError as e:
                raise _corrupted(path, f"bad expiration for session {sid!r}") from e
        return sessions


def _picklable(obj: Any) -> bool:
    try:
        pickle.dumps(obj, protocol=pickle.HIGHEST_PROTOCOL)
    except _PICKLE_ERRORS:
        return False
    return True


def _corrupted(path: Path, reason: str) -> SessionDataCorrupted:
    logger.error("Corrupted session file %s: %s", path, reason)
    return SessionDataCorrupted(f"Corrupted session file {path}: {reason}")
