from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SearchSnapshot:
    """Minimal immutable snapshot of search progress."""

    attempts: int
    elapsed_ms: float
    difficulty: int
    hash_algo: str
    complete: bool = False
    found: bool = False

    nonce: bytes = b""
    digest: bytes = b""
    best_zero_bits: int = 0

    @property
    def hash_rate(self) -> float:
        """Attempts per second so far."""
        if self.elapsed_ms <= 0:
            return 0.0
        return self.attempts / (self.elapsed_ms / 1000)
