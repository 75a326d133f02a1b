"""Tests for the in-memory session persistence backend."""

import threading

import pytest

from session_persistence import PersistentSession, SessionPersistence, SessionSerializationError


def test_implements_protocol(memory_persistence):
    assert isinstance(memory_persistence, SessionPersistence)


def test_load_missing(memory_persistence):
    assert memory_persistence.load_session_attributes("test") is None


def test_persist_and_load(memory_persistence, expiration):
    session = PersistentSession(expiration, {"spring": "boot"})
    memory_persistence.persist_sessions("test", {"abc": session})

    restored = memory_persistence.load_session_attributes("test")

    assert restored == {"abc": session}


def test_stores_copies(memory_persistence, make_session):
    session = make_session(items=["a"])
    sessions = {"abc": session}
    memory_persistence.persist_sessions("test", sessions)

    session.session_data["items"].append("b")
    sessions["other"] = make_session()

    restored = memory_persistence.load_session_attributes("test")
    assert set(restored) == {"abc"}
    assert restored["abc"].session_data["items"] == ["a"]

    restored["abc"].session_data["items"].append("c")
    again = memory_persistence.load_session_attributes("test")
    assert again["abc"].session_data["items"] == ["a"]


def test_dont_restore_expired(memory_persistence, make_session):
    memory_persistence.persist_sessions("test", {"abc": make_session(-1)})
    assert memory_persistence.load_session_attributes("test") == {}


def test_empty_mapping(memory_persistence):
    memory_persistence.persist_sessions("test", {})
    assert memory_persistence.load_session_attributes("test") == {}


def test_clear(memory_persistence):
    memory_persistence.persist_sessions("test", {})
    memory_persistence.clear("test")
    assert memory_persistence.load_session_attributes("test") is None


def test_clear_nonexistent(memory_persistence):
    # Should not raise
    memory_persistence.clear("nonexistent")


def test_uncopyable_value_raises_and_keeps_previous(memory_persistence, make_session):
    memory_persistence.persist_sessions("test", {"old": make_session(x=1)})

    with pytest.raises(SessionSerializationError):
        memory_persistence.persist_sessions("test", {"abc": make_session(lock=threading.Lock())})

    assert set(memory_persistence.load_session_attributes("test")) == {"old"}
