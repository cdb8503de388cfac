"""Chaum-Pedersen zero-knowledge authentication."""

from .client import AuthClient, LoginTranscript
from .coordinator import AuthCoordinator, IssuedChallenge
from .errors import (
    AuthError,
    AuthLookupError,
    MalformedValue,
    NonceReuseError,
    ParameterError,
    ParameterMismatch,
    ProofRejected,
    SecretNotFound,
    SessionAlreadyConsumed,
    SessionCapacityExceeded,
    SessionExpired,
    SessionNotFound,
    UnknownUser,
    UserAlreadyExists,
)
from .groups import DEFAULT_GROUP, GROUPS, I1024, I2048, I3072, TOY, GroupParameters, get_group
from .prover import Commitment, Prover, PublicIdentity, commit, derive_identity, generate_secret, respond
from .registry import UserRegistry
from .sessions import Session, SessionState, SessionStore
from .verifier import Verifier, verify

__all__ = [
    "AuthClient",
    "LoginTranscript",
    "AuthCoordinator",
    "IssuedChallenge",
    "AuthError",
    "AuthLookupError",
    "MalformedValue",
    "NonceReuseError",
    "ParameterError",
    "ParameterMismatch",
    "ProofRejected",
    "SecretNotFound",
    "SessionAlreadyConsumed",
    "SessionCapacityExceeded",
    "SessionExpired",
    "SessionNotFound",
    "UnknownUser",
    "UserAlreadyExists",
    "DEFAULT_GROUP",
    "GROUPS",
    "I1024",
    "I2048",
    "I3072",
    "TOY",
    "GroupParameters",
    "get_group",
    "Commitment",
    "Prover",
    "PublicIdentity",
    "commit",
    "derive_identity",
    "generate_secret",
    "respond",
    "UserRegistry",
    "Session",
    "SessionState",
    "SessionStore",
    "Verifier",
    "verify",
]
