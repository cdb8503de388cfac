"""Client-side driver for registration and login."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, Protocol

from .coordinator import IssuedChallenge
from .errors import ParameterMismatch
from .groups import GroupParameters
from .numbers import EntropyFunction
from .prover import Prover, PublicIdentity, generate_secret
from .store import SecretStore

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """The three exchanges plus the parameter fingerprint.

    :class:`~cpauth.coordinator.AuthCoordinator` satisfies this directly,
    which makes it the in-process transport.
    """

    @property
    def fingerprint(self) -> str: ...

    def handle_register(self, username: str, y1: bytes, y2: bytes) -> None: ...

    def handle_challenge(self, username: str, r1: bytes, r2: bytes) -> IssuedChallenge: ...

    def handle_verify(self, auth_id: str, s: bytes) -> str: ...


@dataclass
class LoginTranscript:
    username: str
    auth_id: str
    r1: int
    r2: int
    challenge: int
    response: int
    session_id: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "user": self.username,
            "auth_id": self.auth_id,
            "r1": hex(self.r1),
            "r2": hex(self.r2),
            "challenge": hex(self.challenge),
            "response": hex(self.response),
            "session_id": self.session_id,
        }


class AuthClient:
    def __init__(
        self,
        params: GroupParameters,
        transport: Transport,
        secret_store: SecretStore,
        entropy_f: EntropyFunction = secrets.token_bytes,
    ) -> None:
        if transport.fingerprint != params.fingerprint():
            raise ParameterMismatch("Client and server use different group parameters")
        self.params = params
        self.transport = transport
        self.secret_store = secret_store
        self._entropy_f = entropy_f

    def register(self, username: str) -> PublicIdentity:
        """Create a secret, register its public values, then persist it.

        The secret is only written once the server has accepted the name, so a
        conflict never clobbers an existing secret.
        """

        secret = generate_secret(self.params, self._entropy_f)
        identity = Prover(self.params, secret).identity
        self.transport.handle_register(
            username,
            self.params.element_to_bytes(identity.y1),
            self.params.element_to_bytes(identity.y2),
        )
        self.secret_store.save(username, secret, self.params)
        logger.info("Registered %r", username)
        return identity

    def login(self, username: str) -> LoginTranscript:
        prover = Prover(
            self.params,
            self.secret_store.load(username, self.params),
            self._entropy_f,
        )
        commitment = prover.commit()
        issued = self.transport.handle_challenge(
            username,
            self.params.element_to_bytes(commitment.r1),
            self.params.element_to_bytes(commitment.r2),
        )
        challenge = self.params.bytes_to_scalar(issued.c)
        response = prover.respond(challenge)
        session_id = self.transport.handle_verify(
            issued.auth_id, self.params.scalar_to_bytes(response)
        )
        logger.info("Logged in %r", username)
        return LoginTranscript(
            username=username,
            auth_id=issued.auth_id,
            r1=commitment.r1,
            r2=commitment.r2,
            challenge=challenge,
            response=response,
            session_id=session_id,
        )


__all__ = ["AuthClient", "LoginTranscript", "Transport"]
