"""Pick a session persistence backend from settings.

Environment variables:
    SESSION_PERSISTENT=true     enable persistence across restarts
    SESSION_BACKEND=file        "file" (default) or "memory"
    SESSION_STORE_DIR=/var/...  storage directory for the file backend
"""

from __future__ import annotations

import logging

from .backend import InMemorySessionPersistence, SessionPersistence
from .config import Settings, get_settings, get_valid_store_dir
from .file import FileSessionPersistence

logger = logging.getLogger(__name__)


def create_persistence(s: Settings | None = None) -> SessionPersistence | None:
    """Create the configured backend, or None when persistence is disabled."""
    s = s or get_settings()
    if not s.persistent:
        return None

    if s.backend == "memory":
        return InMemorySessionPersistence()
    if s.backend == "file":
        store_dir = get_valid_store_dir(s)
        logger.info("Persisting sessions to %s", store_dir)
        return FileSessionPersistence(store_dir)

    raise ValueError(f"Unknown session backend: {s.backend!r}")
