"""Structured session persistence events.

Each lifecycle step (persist, load, clear) is logged to the
``session_persistence.events`` logger as a single-line JSON document.
Consumers attach their own handlers (JSON formatter, log shipper, etc.).

Usage::

    from . import events
    events.persisted("myapp", count=3, backend="file", path="/tmp/myapp.session")
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

logger = logging.getLogger("session_persistence.events")


class Event:
    PERSISTED = "persisted"
    LOADED = "loaded"
    CLEARED = "cleared"


# ── Core emit ──────────────────────────────────────────────────────────────


def emit(event: dict[str, Any]) -> None:
    """Log an event as JSON."""
    logger.info(json.dumps(event, default=str, sort_keys=True))


def _event(name: str, domain: str, **fields: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "event": name,
        "domain": domain,
        "time": int(time.time() * 1000),
    }
    event.update({k: v for k, v in fields.items() if v is not None})
    return event


# ── Event builders ─────────────────────────────────────────────────────────


def persisted(domain: str, *, count: int, backend: str, path: str | None = None) -> None:
    emit(_event(Event.PERSISTED, domain, count=count, backend=backend, path=path))


def loaded(
    domain: str,
    *,
    restored: int,
    discarded: int,
    backend: str,
    path: str | None = None,
) -> None:
    emit(
        _event(
            Event.LOADED,
            domain,
            restored=restored,
            discarded=discarded,
            backend=backend,
            path=path,
        )
    )


def cleared(domain: str, *, backend: str, path: str | None = None) -> None:
    emit(_event(Event.CLEARED, domain, backend=backend, path=path))
