from hashlib import sha256
from itertools import count


class PRG:
    # returns a callable which, when invoked with an integer N, returns N
    # pseudorandom bytes derived from the seed
    def __init__(self, seed: bytes) -> None:
        self.generator = self.block_generator(seed)

    def __call__(self, numbytes: int) -> bytes:
        return bytes(next(self.generator) for _ in range(numbytes))

    @staticmethod
    def block_generator(seed: bytes):
        assert isinstance(seed, bytes)
        for counter in count():
            block = sha256(b"prng-" + str(counter).encode("ascii") + b"-" + seed).digest()
            yield from block


class FixedEntropy:
    """Hands out the queued byte strings in order, for exact test vectors."""

    def __init__(self, *chunks: bytes) -> None:
        self.chunks = list(chunks)

    def __call__(self, numbytes: int) -> bytes:
        chunk = self.chunks.pop(0)
        assert len(chunk) == numbytes, (chunk, numbytes)
        return chunk


class Counter:
    """Predictable token generator: ``prefix-1``, ``prefix-2``, ..."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix
        self.counter = count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self.counter)}"
