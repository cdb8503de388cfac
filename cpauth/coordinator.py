"""Server-side orchestration of the register / challenge / verify exchange."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import AuthLookupError, MalformedValue, ProofRejected, UnknownUser
from .groups import GroupParameters
from .prover import PublicIdentity
from .registry import UserRegistry
from .sessions import SessionStore
from .verifier import Verifier

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32
MAX_USERNAME_LENGTH = 256


def generate_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


@dataclass(frozen=True)
class IssuedChallenge:
    auth_id: str
    c: bytes


def _check_username(username: object) -> str:
    if not isinstance(username, str) or not username:
        raise MalformedValue("Username must be non-empty text")
    if len(username) > MAX_USERNAME_LENGTH:
        raise MalformedValue("Username is too long")
    if any(not char.isprintable() for char in username):
        raise MalformedValue("Username contains control characters")
    return username


class AuthCoordinator:
    """Composes the registry, the session store and the verifier.

    Requests and replies carry fixed-width big-endian byte strings, exactly
    as they travel over the wire.
    """

    def __init__(
        self,
        params: GroupParameters,
        registry: Optional[UserRegistry] = None,
        sessions: Optional[SessionStore] = None,
        *,
        session_id_f: Callable[[], str] = generate_session_id,
    ) -> None:
        self.params = params
        self.registry = registry if registry is not None else UserRegistry()
        self.sessions = sessions if sessions is not None else SessionStore(params)
        if self.sessions.params != params:
            raise ValueError("Session store uses different group parameters")
        self.verifier = Verifier(params)
        self._session_id_f = session_id_f

    @property
    def fingerprint(self) -> str:
        return self.params.fingerprint()

    def handle_register(self, username: str, y1: bytes, y2: bytes) -> None:
        username = _check_username(username)
        identity = PublicIdentity(
            y1=self.params.bytes_to_element(y1, check_member=True),
            y2=self.params.bytes_to_element(y2, check_member=True),
        )
        self.registry.register(username, identity)

    def handle_challenge(self, username: str, r1: bytes, r2: bytes) -> IssuedChallenge:
        username = _check_username(username)
        r1_value = self.params.bytes_to_element(r1, check_member=True)
        r2_value = self.params.bytes_to_element(r2, check_member=True)
        try:
            self.registry.lookup(username)
        except UnknownUser:
            logger.warning("Challenge requested for unknown user %r", username)
            raise
        auth_id, challenge = self.sessions.create(username, r1_value, r2_value)
        logger.info("Issued challenge %s for user %r", auth_id, username)
        return IssuedChallenge(auth_id=auth_id, c=self.params.scalar_to_bytes(challenge))

    def handle_verify(self, auth_id: str, s: bytes) -> str:
        if not isinstance(auth_id, str) or not auth_id:
            raise MalformedValue("Authentication id must be non-empty text")
        response = self.params.bytes_to_scalar(s)
        try:
            session = self.sessions.consume(auth_id)
        except AuthLookupError as exc:
            logger.warning("Verification for auth id %s refused: %s", auth_id, exc.code)
            raise
        identity = self.registry.lookup(session.username)
        if not self.verifier.verify(identity, session.r1, session.r2, session.challenge, response):
            logger.warning("Proof rejected for user %r (auth id %s)", session.username, auth_id)
            raise ProofRejected("Authentication failed")
        logger.info("User %r authenticated (auth id %s)", session.username, auth_id)
        return self._session_id_f()


__all__ = [
    "AuthCoordinator",
    "IssuedChallenge",
    "MAX_USERNAME_LENGTH",
    "SESSION_ID_BYTES",
    "generate_session_id",
]
