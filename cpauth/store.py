"""JSON-backed storage for the client secret and the registry contents."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from typing import Dict, Iterator, MutableMapping

from .errors import ParameterMismatch, SecretNotFound
from .groups import GroupParameters
from .prover import PublicIdentity

_path_locks: Dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: str) -> threading.Lock:
    """Return the lock shared by every store opened on ``path``."""

    key = os.path.realpath(path)
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.Lock())


class JsonFile:
    """One JSON document holding named sections of string-keyed records.

    Stores opened on the same path share a lock, and every write replaces
    the file atomically, so readers never see a partially written document.
    """

    def __init__(self, path: str, section: str) -> None:
        self.path = path
        self.section = section
        self._lock = _lock_for(path)
        self._ensure_file()

    def _ensure_file(self) -> None:
        with self._lock:
            if not os.path.exists(self.path):
                self._save({})

    def _load(self) -> Dict[str, dict]:
        with open(self.path, "r", encoding="utf-8") as handle:
            return json.load(handle)

    def _save(self, payload: Dict[str, dict]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        # mkstemp creates the file with mode 0600
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".cpauth-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def records(self) -> Dict[str, dict]:
        return self._load().get(self.section, {})

    def put(self, key: str, record: dict) -> None:
        with self._lock:
            payload = self._load()
            payload.setdefault(self.section, {})[key] = record
            self._save(payload)

    def remove(self, key: str) -> None:
        with self._lock:
            payload = self._load()
            records = payload.get(self.section, {})
            if key not in records:
                raise KeyError(key)
            del records[key]
            self._save(payload)


class SecretStore(JsonFile):
    """Client secrets keyed by username, tagged with the group they belong to."""

    def __init__(self, path: str) -> None:
        super().__init__(path, "secrets")

    def save(self, username: str, secret: int, params: GroupParameters) -> None:
        self.put(username, {"secret": hex(secret), "group": params.fingerprint()})

    def load(self, username: str, params: GroupParameters) -> int:
        record = self.records().get(username)
        if record is None:
            raise SecretNotFound(username)
        if record.get("group") != params.fingerprint():
            raise ParameterMismatch(
                f"Secret for {username!r} was created for different group parameters"
            )
        return int(record["secret"], 16)

    def delete(self, username: str) -> None:
        try:
            self.remove(username)
        except KeyError:
            raise SecretNotFound(username) from None

    def __contains__(self, username: object) -> bool:
        return username in self.records()


class IdentityStore(JsonFile, MutableMapping[str, PublicIdentity]):
    """Registry storage that survives restarts of the command line demo."""

    def __init__(self, path: str) -> None:
        JsonFile.__init__(self, path, "users")

    def __getitem__(self, username: str) -> PublicIdentity:
        return PublicIdentity.from_dict(self.records()[username])

    def __setitem__(self, username: str, identity: PublicIdentity) -> None:
        self.put(username, identity.to_dict())

    def __delitem__(self, username: str) -> None:
        self.remove(username)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.records()))

    def __len__(self) -> int:
        return len(self.records())

    def __contains__(self, username: object) -> bool:
        return username in self.records()


__all__ = ["IdentityStore", "JsonFile", "SecretStore"]
