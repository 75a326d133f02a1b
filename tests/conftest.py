"""Shared fixtures for the session persistence test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from session_persistence import FileSessionPersistence, InMemorySessionPersistence, PersistentSession
from session_persistence.config import override_settings


@pytest.fixture(autouse=True)
def reset_settings():
    """Never leak injected Settings between tests."""
    override_settings(None)
    yield
    override_settings(None)


# ── Session factories ─────────────────────────────────────────────────────

@pytest.fixture
def expiration() -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=10)


@pytest.fixture
def make_session():
    """Factory for sessions expiring ``seconds`` from now."""

    def _make(seconds: float = 10, **data) -> PersistentSession:
        expires = datetime.now(timezone.utc) + timedelta(seconds=seconds)
        return PersistentSession(expires, dict(data))

    return _make


# ── Backends ──────────────────────────────────────────────────────────────

@pytest.fixture
def folder(tmp_path):
    folder = tmp_path / "sessions"
    folder.mkdir()
    return folder


@pytest.fixture
def persistence(folder) -> FileSessionPersistence:
    return FileSessionPersistence(folder)


@pytest.fixture
def memory_persistence() -> InMemorySessionPersistence:
    return InMemorySessionPersistence()
