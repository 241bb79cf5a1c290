import secrets
from typing import Callable, Iterable, Protocol, runtime_checkable

from hashcash_prover.errors import NonceSourceExhausted


@runtime_checkable
class NonceGenerator(Protocol):
    """Anything with a zero-argument `next()` that returns the next candidate nonce."""

    def next(self) -> bytes: ...


def encode_counter(value: int) -> bytes:
    """Minimal big-endian encoding of a non-negative integer, at least one byte long."""
    if value < 0:
        raise ValueError(f"counter must be non-negative, got {value}")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


class SequentialNonceGenerator:
    """Yields 0, 1, 2, ... as big-endian bytes that grow as the counter does."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative, got {start}")
        self.counter = start

    def next(self) -> bytes:
        nonce = encode_counter(self.counter)
        self.counter += 1
        return nonce


class RandomNonceGenerator:
    def __init__(self, size: int = 16) -> None:
        if size < 1:
            raise ValueError(f"size must be at least 1, got {size}")
        self.size = size

    def next(self) -> bytes:
        return secrets.token_bytes(self.size)


class CallableNonceGenerator:
    """Adapts a zero-argument function to the generator interface."""

    def __init__(self, fn: Callable[[], bytes]) -> None:
        self._fn = fn

    def next(self) -> bytes:
        return bytes(self._fn())


class IterableNonceGenerator:
    """Adapts an iterable (list, Python generator, ...) of byte strings."""

    def __init__(self, source: Iterable[bytes]) -> None:
        self._it = iter(source)

    def next(self) -> bytes:
        try:
            return bytes(next(self._it))
        except StopIteration:
            raise NonceSourceExhausted("nonce source has no more candidates") from None


NONCE_STRATEGIES: dict[str, Callable[[], NonceGenerator]] = {
    "sequential": SequentialNonceGenerator,
    "random": RandomNonceGenerator,
}
