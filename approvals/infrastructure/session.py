"""In-memory credential storage for the current operator."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from approvals.core.clock import Clock, SystemClock
from approvals.domain import Identity

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Session:
    token: str
    identity: Identity
    expires_at: datetime


class SessionStore:
    """Holds at most one session; it lapses after ``ttl`` like the login cookie did."""

    def __init__(self, *, ttl: timedelta = timedelta(minutes=30), clock: Clock | None = None) -> None:
        self._ttl = ttl
        self._clock = clock or SystemClock()
        self._session: Session | None = None

    def _current(self) -> Session | None:
        session = self._session
        if session is not None and self._clock.now() >= session.expires_at:
            logger.info("session for %s expired", session.identity.username)
            self._session = None
            return None
        return session

    def store(self, token: str, identity: Identity) -> Session:
        session = Session(token=token, identity=identity, expires_at=self._clock.now() + self._ttl)
        self._session = session
        return session

    def token(self) -> str | None:
        session = self._current()
        return session.token if session else None

    def identity(self) -> Identity | None:
        session = self._current()
        return session.identity if session else None

    def is_authenticated(self) -> bool:
        return self._current() is not None

    def clear(self) -> None:
        self._session = None
