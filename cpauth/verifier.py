"""Server side check of a Chaum-Pedersen proof."""

from __future__ import annotations

import secrets

from .groups import GroupParameters
from .numbers import EntropyFunction, modpow, random_residue
from .prover import PublicIdentity


def random_challenge(
    params: GroupParameters, entropy_f: EntropyFunction = secrets.token_bytes
) -> int:
    return random_residue(params.q, entropy_f)


def verify(
    params: GroupParameters,
    identity: PublicIdentity,
    r1: int,
    r2: int,
    challenge: int,
    response: int,
) -> bool:
    """Accept iff ``alpha^s * y1^c == r1`` and ``beta^s * y2^c == r2`` mod p.

    Both equations must hold. Values outside their ranges are treated as a
    failed proof rather than an error.
    """

    p, q = params.p, params.q
    for element in (identity.y1, identity.y2, r1, r2):
        if not 0 <= element < p:
            return False
    if not (0 <= challenge < q and 0 <= response < q):
        return False

    lhs1 = (modpow(params.alpha, response, p) * modpow(identity.y1, challenge, p)) % p
    lhs2 = (modpow(params.beta, response, p) * modpow(identity.y2, challenge, p)) % p
    return lhs1 == r1 and lhs2 == r2


class Verifier:
    """Binds :func:`verify` to one set of group parameters."""

    def __init__(self, params: GroupParameters) -> None:
        self.params = params

    def verify(
        self,
        identity: PublicIdentity,
        r1: int,
        r2: int,
        challenge: int,
        response: int,
    ) -> bool:
        return verify(self.params, identity, r1, r2, challenge, response)


__all__ = ["Verifier", "random_challenge", "verify"]
