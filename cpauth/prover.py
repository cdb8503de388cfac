"""Client side of the Chaum-Pedersen identification protocol."""

from __future__ import annotations

import secrets
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .errors import NonceReuseError
from .groups import GroupParameters
from .numbers import EntropyFunction, mod_mul_exp, mod_sub_exp, modpow, random_residue


@dataclass(frozen=True)
class PublicIdentity:
    """Public values registered under a username."""

    y1: int
    y2: int

    def to_dict(self) -> Dict[str, str]:
        return {"y1": hex(self.y1), "y2": hex(self.y2)}

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "PublicIdentity":
        return PublicIdentity(y1=int(data["y1"], 16), y2=int(data["y2"], 16))


@dataclass(frozen=True)
class Commitment:
    """First message of a protocol run: ``r1 = alpha^k`` and ``r2 = beta^k``."""

    r1: int
    r2: int


def _check_scalar(params: GroupParameters, value: int, label: str) -> None:
    if not 0 <= value < params.q:
        raise ValueError(f"{label} must lie in [0, q)")


def generate_secret(
    params: GroupParameters, entropy_f: EntropyFunction = secrets.token_bytes
) -> int:
    """Generate a fresh long-term secret ``x``."""

    return random_residue(params.q, entropy_f)


def derive_identity(params: GroupParameters, secret: int) -> PublicIdentity:
    _check_scalar(params, secret, "Secret")
    return PublicIdentity(
        y1=modpow(params.alpha, secret, params.p),
        y2=modpow(params.beta, secret, params.p),
    )


def commit(
    params: GroupParameters, entropy_f: EntropyFunction = secrets.token_bytes
) -> Tuple[int, Commitment]:
    """Sample a fresh nonce ``k`` and commit to it.

    The caller keeps ``k`` only until :func:`respond` has been computed. A
    nonce used to answer two different challenges reveals the secret.
    """

    nonce = random_residue(params.q, entropy_f)
    commitment = Commitment(
        r1=modpow(params.alpha, nonce, params.p),
        r2=modpow(params.beta, nonce, params.p),
    )
    return nonce, commitment


def respond(params: GroupParameters, secret: int, nonce: int, challenge: int) -> int:
    """Compute ``s = (k - c * x) mod q``."""

    _check_scalar(params, secret, "Secret")
    _check_scalar(params, nonce, "Nonce")
    _check_scalar(params, challenge, "Challenge")
    return mod_sub_exp(nonce, mod_mul_exp(challenge, secret, params.q), params.q)


class Prover:
    """Holds a long-term secret and answers one challenge per commitment."""

    def __init__(
        self,
        params: GroupParameters,
        secret: int,
        entropy_f: EntropyFunction = secrets.token_bytes,
    ) -> None:
        _check_scalar(params, secret, "Secret")
        self.params = params
        self._secret = secret
        self._entropy_f = entropy_f
        self._nonce: Optional[int] = None
        self.identity = derive_identity(params, secret)

    def __repr__(self) -> str:
        return f"Prover(group={self.params.name!r}, identity={self.identity!r})"

    def commit(self) -> Commitment:
        # a pending nonce that never saw a challenge is simply dropped
        self._nonce, commitment = commit(self.params, self._entropy_f)
        return commitment

    def respond(self, challenge: int) -> int:
        if self._nonce is None:
            raise NonceReuseError("respond() needs a fresh commit() first")
        nonce, self._nonce = self._nonce, None
        return respond(self.params, self._secret, nonce, challenge)


__all__ = [
    "PublicIdentity",
    "Commitment",
    "generate_secret",
    "derive_identity",
    "commit",
    "respond",
    "Prover",
]
