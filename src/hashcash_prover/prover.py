"""Hashcash style proof-of-work search.

A block is `data || nonce`. The search asks the nonce generator for candidates,
hashes each block and stops at the first digest with `difficulty` leading zero
bits, or when the time budget runs out.
"""
from __future__ import annotations

import asyncio
import threading
import time
from enum import Enum
from typing import Callable, Optional, TypeAlias, Union

import structlog

from hashcash_prover import hashing
from hashcash_prover.config import DEFAULT_HASH_ALGO, DEFAULT_TIMEOUT_MS, SearchConfig
from hashcash_prover.errors import InvalidNonceGenerator
from hashcash_prover.nonces import NonceGenerator
from hashcash_prover.search_snapshot import SearchSnapshot


log = structlog.get_logger()

BytesLike: TypeAlias = Union[bytes, bytearray, memoryview]
Observer: TypeAlias = Callable[[SearchSnapshot], None]

DEFAULT_REPORT_EVERY = 1000


def prepare_block(data: BytesLike, nonce: BytesLike) -> bytes:
    """Return a new block holding the data bytes followed by the nonce bytes."""
    return bytes(data) + bytes(nonce)


def is_acceptable(digest: BytesLike, difficulty: int) -> bool:
    """
    True if the digest starts with at least `difficulty` zero bits.
    Full bytes are checked first, then the top `difficulty % 8` bits of the next byte.
    A difficulty larger than the digest's bit length can never be met.
    """
    if difficulty < 0:
        raise ValueError(f"difficulty must be non-negative, got {difficulty}")
    if difficulty > len(digest) * 8:
        return False

    full_zero_bytes, remainder_bits = divmod(difficulty, 8)
    for i in range(full_zero_bytes):
        if digest[i] != 0:
            return False

    if remainder_bits == 0:
        return True

    # 3 remainder bits: 11111111 => 11100000
    mask = (0xFF << (8 - remainder_bits)) & 0xFF
    return digest[full_zero_bytes] & mask == 0


def leading_zero_bits(digest: BytesLike) -> int:
    """Count the zero bits at the start of the digest."""
    bits = 0
    for byte in digest:
        if byte != 0:
            return bits + 8 - byte.bit_length()
        bits += 8
    return bits


def check_nonce_generator(nonce_generator: object) -> None:
    if not callable(getattr(nonce_generator, "next", None)):
        raise InvalidNonceGenerator(
            "The nonce generator should have a next() method that returns bytes "
            "(wrap Python iterators with IterableNonceGenerator)."
        )


class Outcome(Enum):
    CONTINUE = "continue"
    FOUND = "found"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


class SearchRun:
    """Bookkeeping for one call to Prover.process: clock, counters and progress reports."""

    def __init__(
        self,
        config: SearchConfig,
        difficulty: int,
        *,
        observer: Optional[Observer] = None,
        cancel: Optional[threading.Event] = None,
        report_every: int = DEFAULT_REPORT_EVERY,
    ) -> None:
        self.config = config
        self.difficulty = difficulty
        self.observer = observer
        self.cancel = cancel
        self.report_every = report_every
        self.attempts = 0
        self.best_zero_bits = 0
        self.started = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.started) * 1000

    def step(self, nonce: bytes, digest: bytes) -> Outcome:
        """Judge one hashed attempt. The deadline wins over a late success."""
        self.attempts += 1
        elapsed_ms = self.elapsed_ms()

        if self.observer is not None:
            self.best_zero_bits = max(self.best_zero_bits, leading_zero_bits(digest))
            if self.attempts % self.report_every == 0:
                self.publish(nonce, digest, elapsed_ms)

        if elapsed_ms > self.config.timeout_ms:
            return Outcome.TIMED_OUT
        if self.cancel is not None and self.cancel.is_set():
            return Outcome.CANCELLED
        if is_acceptable(digest, self.difficulty):
            return Outcome.FOUND
        return Outcome.CONTINUE

    def publish(self, nonce: bytes, digest: bytes, elapsed_ms: float, *, complete: bool = False, found: bool = False) -> None:
        self.observer(SearchSnapshot(
            attempts=self.attempts,
            elapsed_ms=elapsed_ms,
            difficulty=self.difficulty,
            hash_algo=self.config.hash_algo,
            complete=complete,
            found=found,
            nonce=nonce,
            digest=digest,
            best_zero_bits=self.best_zero_bits,
        ))

    def finish(self, outcome: Outcome, nonce: bytes, digest: bytes) -> Optional[bytes]:
        elapsed_ms = self.elapsed_ms()
        found = outcome is Outcome.FOUND
        log.debug(
            "search_finished",
            outcome=outcome.value,
            attempts=self.attempts,
            elapsed_ms=round(elapsed_ms, 1),
        )
        if self.observer is not None:
            self.publish(nonce, digest, elapsed_ms, complete=True, found=found)
        return nonce if found else None


class Prover:
    """Proof-of-work prover. Holds only immutable settings, so one instance can serve many searches."""

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT_MS,
        hash_algo: str = DEFAULT_HASH_ALGO,
        *,
        report_every: int = DEFAULT_REPORT_EVERY,
    ) -> None:
        if report_every < 1:
            raise ValueError(f"report_every must be at least 1, got {report_every}")
        self.config = SearchConfig(timeout_ms=timeout, hash_algo=hash_algo)
        self.report_every = report_every

    @classmethod
    def from_config(cls, config: SearchConfig, **kwargs) -> "Prover":
        return cls(timeout=config.timeout_ms, hash_algo=config.hash_algo, **kwargs)

    @property
    def timeout(self) -> int:
        return self.config.timeout_ms

    @property
    def hash_algo(self) -> str:
        return self.config.hash_algo

    def prepare_block(self, data: BytesLike, nonce: BytesLike) -> bytes:
        return prepare_block(data, nonce)

    def is_acceptable(self, digest: BytesLike, difficulty: int) -> bool:
        return is_acceptable(digest, difficulty)

    def calculate_hash(self, block: bytes) -> bytes:
        return hashing.digest(self.config.hash_algo, block)

    def _begin(
        self,
        difficulty: int,
        data: BytesLike,
        nonce_generator: NonceGenerator,
        observer: Optional[Observer],
        cancel: Optional[threading.Event],
    ) -> SearchRun:
        check_nonce_generator(nonce_generator)
        if difficulty < 0:
            raise ValueError(f"difficulty must be non-negative, got {difficulty}")

        log.debug(
            "search_started",
            difficulty=difficulty,
            hash_algo=self.config.hash_algo,
            timeout_ms=self.config.timeout_ms,
            payload_len=len(data),
        )
        return SearchRun(
            self.config,
            difficulty,
            observer=observer,
            cancel=cancel,
            report_every=self.report_every,
        )

    def process(
        self,
        difficulty: int,
        data: BytesLike,
        nonce_generator: NonceGenerator,
        *,
        observer: Optional[Observer] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[bytes]:
        """
        Search for a nonce such that hash(data || nonce) has `difficulty` leading zero bits.
        Returns the nonce, or None if the timeout elapsed (or `cancel` was set) first.
        At least one nonce is always tried.
        """
        run = self._begin(difficulty, data, nonce_generator, observer, cancel)
        data = bytes(data)

        while True:
            nonce = bytes(nonce_generator.next())
            block = prepare_block(data, nonce)
            digest = self.calculate_hash(block)

            outcome = run.step(nonce, digest)
            if outcome is not Outcome.CONTINUE:
                return run.finish(outcome, nonce, digest)

    async def process_async(
        self,
        difficulty: int,
        data: BytesLike,
        nonce_generator: NonceGenerator,
        *,
        observer: Optional[Observer] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Optional[bytes]:
        """Same search as process(), hashing in a worker thread so the event loop stays free."""
        run = self._begin(difficulty, data, nonce_generator, observer, cancel)
        data = bytes(data)

        while True:
            nonce = bytes(nonce_generator.next())
            block = prepare_block(data, nonce)
            digest = await asyncio.to_thread(self.calculate_hash, block)

            outcome = run.step(nonce, digest)
            if outcome is not Outcome.CONTINUE:
                return run.finish(outcome, nonce, digest)
