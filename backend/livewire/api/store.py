"""In-memory registry of tracing sessions.

Sessions live only as long as the process. Each entry carries a lock: the
search must never be stepped or re-seeded from two request threads at once.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from livewire.config import settings
from livewire.engine.session import BoundarySession

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    pass


class SessionLimitError(RuntimeError):
    pass


@dataclass
class _Entry:
    session: BoundarySession
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionStore:
    def __init__(self, max_sessions: int | None = None) -> None:
        self.max_sessions = max_sessions
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, session: BoundarySession) -> str:
        with self._guard:
            if self.max_sessions is not None and len(self._entries) >= self.max_sessions:
                raise SessionLimitError(f"Session limit of {self.max_sessions} reached")
            session_id = uuid.uuid4().hex
            self._entries[session_id] = _Entry(session)
        logger.info("Session %s created (%dx%d)", session_id, session.width, session.height)
        return session_id

    def remove(self, session_id: str) -> None:
        with self._guard:
            if self._entries.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
        logger.info("Session %s removed", session_id)

    @contextmanager
    def acquire(self, session_id: str) -> Iterator[BoundarySession]:
        """Exclusive access to one session for the duration of the block."""
        with self._guard:
            entry = self._entries.get(session_id)
        if entry is None:
            raise SessionNotFoundError(session_id)
        with entry.lock:
            yield entry.session

    def clear(self) -> None:
        with self._guard:
            self._entries.clear()


# Module-level singleton
session_store = SessionStore(max_sessions=settings.max_sessions)
