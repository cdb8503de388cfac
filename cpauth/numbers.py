"""Modular arithmetic primitives shared by the prover and the verifier."""

from __future__ import annotations

import secrets
from typing import Callable

EntropyFunction = Callable[[int], bytes]


def size_bits(maxval: int) -> int:
    return maxval.bit_length() or 1


def size_bytes(maxval: int) -> int:
    return (size_bits(maxval) + 7) // 8


def number_to_bytes(num: int, maxval: int) -> bytes:
    """Encode ``num`` big-endian, padded to the width of ``maxval``."""

    if num < 0 or num > maxval:
        raise ValueError("Value does not fit the fixed-width encoding")
    return num.to_bytes(size_bytes(maxval), "big")


def bytes_to_number(data: bytes) -> int:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("Expected bytes")
    return int.from_bytes(data, "big")


def modpow(base: int, exponent: int, modulus: int) -> int:
    if modulus <= 0:
        raise ValueError("Modulus must be positive")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    return pow(base, exponent, modulus)


def mod_sub_exp(a: int, b: int, q: int) -> int:
    """Return ``(a - b) mod q`` as a representative in [0, q)."""

    if q <= 0:
        raise ValueError("Modulus must be positive")
    # % takes the sign of the divisor, so a negative difference wraps into range
    return (a - b) % q


def mod_add_exp(a: int, b: int, q: int) -> int:
    return (a + b) % q


def mod_mul_exp(a: int, b: int, q: int) -> int:
    return (a * b) % q


def generate_mask(maxval: int) -> tuple[int, int]:
    num_bytes = size_bytes(maxval)
    leftover_bits = size_bits(maxval) % 8
    if leftover_bits:
        top_byte_mask = (0x1 << leftover_bits) - 1
    else:
        top_byte_mask = 0xFF
    return top_byte_mask, num_bytes


def random_residue(q: int, entropy_f: EntropyFunction = secrets.token_bytes) -> int:
    """Sample uniformly from [0, q).

    Draws just enough bytes to cover ``q``, masks the excess high bits and
    retries until the candidate lands in range, so the result is unbiased.
    On average fewer than two draws are needed.
    """

    if q <= 0:
        raise ValueError("Range must be non-empty")
    top_byte_mask, num_bytes = generate_mask(q)
    while True:
        raw = entropy_f(num_bytes)
        if len(raw) != num_bytes:
            raise ValueError("Entropy source returned the wrong number of bytes")
        candidate = bytes([raw[0] & top_byte_mask]) + raw[1:]
        value = int.from_bytes(candidate, "big")
        if value < q:
            return value


__all__ = [
    "EntropyFunction",
    "size_bits",
    "size_bytes",
    "number_to_bytes",
    "bytes_to_number",
    "modpow",
    "mod_sub_exp",
    "mod_add_exp",
    "mod_mul_exp",
    "generate_mask",
    "random_residue",
]
