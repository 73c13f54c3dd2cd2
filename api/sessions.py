"""Booking screens keyed by the X-Session-Id header."""

import logging
import time
from typing import Callable

from starlette.requests import Request

from clients.booking_client import BookingClient
from clients.valkey_client import ValkeyClient
from core.config import BookingConfig
from core.services.booking_session import BookingSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    Holds the one active BookingSession per session id.

    A session id seen for the first time (or again after close) gets a fresh
    BookingSession, which restores itself from the session store. Screens
    left untouched for longer than the session TTL are closed on the next
    lookup; their stored snapshot has expired by then anyway.
    """

    HEADER = "X-Session-Id"

    def __init__(
        self,
        client: BookingClient,
        valkey: ValkeyClient,
        config: BookingConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.valkey = valkey
        self.config = config or BookingConfig()
        self._clock = clock
        self._sessions: dict[str, BookingSession] = {}
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def session_id(self, request: Request) -> str:
        session_id = (request.headers.get(self.HEADER) or "").strip()
        if not session_id:
            raise ValueError(f"{self.HEADER} header is required")
        return session_id

    def get(self, request: Request) -> BookingSession:
        session_id = self.session_id(request)
        now = self._clock()
        self.evict_idle(now)

        session = self._sessions.get(session_id)
        if session is None:
            session = BookingSession(session_id, self.client, self.valkey, config=self.config)
            self._sessions[session_id] = session
            logger.debug(f"Opened booking screen for session {session_id}")
        self._last_seen[session_id] = now
        return session

    def evict_idle(self, now: float | None = None) -> int:
        """Close screens idle for longer than the session TTL. Returns how many closed."""
        now = self._clock() if now is None else now
        cutoff = now - self.config.session_ttl_seconds
        idle = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in idle:
            self.close(session_id)
        if idle:
            logger.info(f"Closed {len(idle)} idle booking screen(s)")
        return len(idle)

    def close(self, session_id: str) -> bool:
        """Close one screen (pending writes flushed). False if it was not open."""
        self._last_seen.pop(session_id, None)
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)
