from dataclasses import dataclass


DEFAULT_TIMEOUT_MS = 6000
DEFAULT_HASH_ALGO = "SHA-256"


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Immutable settings shared by every search a Prover runs."""

    timeout_ms: int = DEFAULT_TIMEOUT_MS
    hash_algo: str = DEFAULT_HASH_ALGO

    def __post_init__(self) -> None:
        if self.timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {self.timeout_ms}")
        if not self.hash_algo:
            raise ValueError("hash_algo must be a non-empty algorithm identifier")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000
