"""Username to public identity mapping held by the server."""

from __future__ import annotations

import logging
import threading
from typing import MutableMapping, Optional

from .errors import UnknownUser, UserAlreadyExists
from .prover import PublicIdentity

logger = logging.getLogger(__name__)


class UserRegistry:
    """Write-once registry of public identities.

    Re-registering a name is a conflict, never an overwrite, so an
    unauthenticated caller cannot replace someone else's public values.
    """

    def __init__(self, storage: Optional[MutableMapping[str, PublicIdentity]] = None) -> None:
        self._storage: MutableMapping[str, PublicIdentity] = {} if storage is None else storage
        self._lock = threading.Lock()

    def __contains__(self, username: object) -> bool:
        return username in self._storage

    def __len__(self) -> int:
        return len(self._storage)

    def register(self, username: str, identity: PublicIdentity) -> None:
        with self._lock:
            if username in self._storage:
                raise UserAlreadyExists(f"User {username!r} already exists")
            self._storage[username] = identity
        logger.info("Registered user %r", username)

    def lookup(self, username: str) -> PublicIdentity:
        try:
            return self._storage[username]
        except KeyError:
            raise UnknownUser("Unknown user") from None


__all__ = ["UserRegistry"]
