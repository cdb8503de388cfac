"""Pending challenges awaiting an answer.

Each session moves from ``PENDING`` to ``CONSUMED`` exactly once, on the
first verification attempt that reads it, whatever the outcome. Lookup and
transition happen under one lock so two racing attempts on the same
``auth_id`` cannot both observe ``PENDING``.
"""

from __future__ import annotations

import enum
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .errors import (
    SessionAlreadyConsumed,
    SessionCapacityExceeded,
    SessionExpired,
    SessionNotFound,
)
from .groups import GroupParameters
from .numbers import EntropyFunction
from .verifier import random_challenge

logger = logging.getLogger(__name__)

AUTH_ID_BYTES = 16


def generate_auth_id() -> str:
    return secrets.token_urlsafe(AUTH_ID_BYTES)


class SessionState(enum.Enum):
    PENDING = "pending"
    CONSUMED = "consumed"


@dataclass
class Session:
    auth_id: str
    username: str
    challenge: int
    r1: int
    r2: int
    created_at: float
    state: SessionState = SessionState.PENDING
    consumed_at: Optional[float] = None


class SessionStore:
    """Thread-safe map from ``auth_id`` to :class:`Session`."""

    def __init__(
        self,
        params: GroupParameters,
        *,
        entropy_f: EntropyFunction = secrets.token_bytes,
        token_f: Callable[[], str] = generate_auth_id,
        clock: Callable[[], float] = time.monotonic,
        max_age: Optional[float] = None,
        max_pending: Optional[int] = None,
    ) -> None:
        if max_age is not None and max_age <= 0:
            raise ValueError("max_age must be positive")
        if max_pending is not None and max_pending <= 0:
            raise ValueError("max_pending must be positive")
        if max_pending is not None and max_age is None:
            # without an age bound nothing would ever free a slot
            raise ValueError("max_pending requires max_age")
        self.params = params
        self.max_age = max_age
        self.max_pending = max_pending
        self._entropy_f = entropy_f
        self._token_f = token_f
        self._clock = clock
        self._lock = threading.Lock()
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, auth_id: object) -> bool:
        with self._lock:
            return auth_id in self._sessions

    def pending_count(self) -> int:
        with self._lock:
            return self._pending_locked()

    def _pending_locked(self) -> int:
        return sum(
            1 for session in self._sessions.values() if session.state is SessionState.PENDING
        )

    def _is_stale(self, session: Session, now: float) -> bool:
        return self.max_age is not None and now - session.created_at > self.max_age

    def create(self, username: str, r1: int, r2: int) -> Tuple[str, int]:
        """Issue a fresh challenge for a commitment, returning ``(auth_id, c)``."""

        challenge = random_challenge(self.params, self._entropy_f)
        with self._lock:
            now = self._clock()
            if self.max_pending is not None:
                if self._pending_locked() >= self.max_pending:
                    self._sweep_locked(now)
                if self._pending_locked() >= self.max_pending:
                    raise SessionCapacityExceeded("Too many pending challenges")
            auth_id = self._token_f()
            while auth_id in self._sessions:
                auth_id = self._token_f()
            self._sessions[auth_id] = Session(
                auth_id=auth_id,
                username=username,
                challenge=challenge,
                r1=r1,
                r2=r2,
                created_at=now,
            )
        return auth_id, challenge

    def consume(self, auth_id: str) -> Session:
        """Atomically move a session to ``CONSUMED`` and return its data.

        Raises :class:`SessionNotFound`, :class:`SessionAlreadyConsumed` or,
        when a max age is configured, :class:`SessionExpired`. An expired
        session is consumed as well.
        """

        with self._lock:
            session = self._sessions.get(auth_id)
            if session is None:
                raise SessionNotFound("Unknown session")
            if session.state is SessionState.CONSUMED:
                raise SessionAlreadyConsumed("Session already used")
            now = self._clock()
            session.state = SessionState.CONSUMED
            session.consumed_at = now
            if self._is_stale(session, now):
                raise SessionExpired("Session expired")
            return session

    def sweep(self) -> int:
        """Drop expired sessions and old consumed entries, returning the count."""

        with self._lock:
            return self._sweep_locked(self._clock())

    def _sweep_locked(self, now: float) -> int:
        if self.max_age is None:
            return 0
        stale = [
            auth_id
            for auth_id, session in self._sessions.items()
            if self._is_stale(session, now)
        ]
        for auth_id in stale:
            del self._sessions[auth_id]
        if stale:
            logger.debug("Swept %d stale sessions", len(stale))
        return len(stale)


__all__ = [
    "AUTH_ID_BYTES",
    "Session",
    "SessionState",
    "SessionStore",
    "generate_auth_id",
]
