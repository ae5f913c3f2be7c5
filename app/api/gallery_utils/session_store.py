"""
In-memory registry of gallery sessions.

- Keyed by the session id carried in the signed session cookie
- Idle sessions expire after the configured TTL
- Uses monotonic() for TTL comparison (immune to system clock changes)
"""

import uuid
from time import monotonic
from typing import Callable, Dict, Optional

from app.api.gallery_utils.controller import GallerySession


class SessionStore:
    def __init__(self, ttl_seconds: float = 3600, clock: Callable[[], float] = monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # { session_id: (last_seen_monotonic, session) }
        self._sessions: Dict[str, tuple[float, GallerySession]] = {}

    def new_session(self, tag: str, welcome_seconds: float = 5.0) -> GallerySession:
        """Creates an unregistered session; ``register`` it once authenticated."""
        return GallerySession(
            session_id=uuid.uuid4().hex,
            tag=tag,
            welcome_seconds=welcome_seconds,
            clock=self._clock,
        )

    def register(self, session: GallerySession) -> None:
        self.purge_expired()
        self._sessions[session.session_id] = (self._clock(), session)

    def get(self, session_id: str) -> Optional[GallerySession]:
        cached = self._sessions.get(session_id)
        now = self._clock()

        if cached is None:
            return None
        if now - cached[0] > self.ttl_seconds:
            self.discard(session_id)
            return None

        self._sessions[session_id] = (now, cached[1])
        return cached[1]

    def discard(self, session_id: str) -> None:
        entry = self._sessions.pop(session_id, None)
        if entry is not None:
            entry[1].logout()

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [
            sid for sid, (last_seen, _) in self._sessions.items()
            if now - last_seen > self.ttl_seconds
        ]
        for sid in expired:
            self.discard(sid)
        return len(expired)

    def active_count(self) -> int:
        self.purge_expired()
        return len(self._sessions)

    def clear(self) -> None:
        for sid in list(self._sessions):
            self.discard(sid)
