"""Error taxonomy for the Chaum-Pedersen authentication service."""

from __future__ import annotations


class AuthError(Exception):
    """Base class for failures surfaced to a protocol caller."""

    code = "AuthError"


class MalformedValue(AuthError):
    """A submitted field is malformed or a residue is outside its range."""

    code = "MalformedValue"


class UserAlreadyExists(AuthError):
    """The username is already registered. No state was changed."""

    code = "UserAlreadyExists"


class AuthLookupError(AuthError):
    code = "LookupError"


class UnknownUser(AuthLookupError):
    code = "UnknownUser"


class SessionNotFound(AuthLookupError):
    code = "SessionNotFound"


class SessionAlreadyConsumed(AuthLookupError):
    """The session was already used by an earlier verification attempt."""

    code = "SessionAlreadyConsumed"


class SessionExpired(AuthLookupError):
    code = "SessionExpired"


class ProofRejected(AuthError):
    """The verification equations did not hold."""

    code = "ProofRejected"


class SessionCapacityExceeded(AuthError):
    """Too many challenges are awaiting an answer."""

    code = "SessionCapacityExceeded"


class ParameterError(ValueError):
    """The group description is not a valid Chaum-Pedersen setting."""


class ParameterMismatch(Exception):
    """Client and server disagree on the group parameters."""


class NonceReuseError(RuntimeError):
    """respond() was called without a fresh commitment. Answering two
    challenges with the same nonce reveals the secret."""


class SecretNotFound(KeyError):
    pass


__all__ = [
    "AuthError",
    "MalformedValue",
    "UserAlreadyExists",
    "AuthLookupError",
    "UnknownUser",
    "SessionNotFound",
    "SessionAlreadyConsumed",
    "SessionExpired",
    "ProofRejected",
    "SessionCapacityExceeded",
    "ParameterError",
    "ParameterMismatch",
    "NonceReuseError",
    "SecretNotFound",
]
