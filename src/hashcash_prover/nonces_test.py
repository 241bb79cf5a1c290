import pytest

from hashcash_prover.errors import NonceSourceExhausted
from hashcash_prover.nonces import (
    CallableNonceGenerator,
    IterableNonceGenerator,
    NONCE_STRATEGIES,
    NonceGenerator,
    RandomNonceGenerator,
    SequentialNonceGenerator,
    encode_counter,
)


class TestEncodeCounter:

    @pytest.mark.parametrize("value, encoded", [
        (0, b"\x00"),
        (1, b"\x01"),
        (255, b"\xff"),
        (256, b"\x01\x00"),
        (65535, b"\xff\xff"),
        (65536, b"\x01\x00\x00"),
    ])
    def test_minimal_big_endian(self, value, encoded):
        assert encode_counter(value) == encoded

    def test_negative(self):
        with pytest.raises(ValueError):
            encode_counter(-1)


class TestSequentialNonceGenerator:

    def test_counts_up_from_zero(self):
        generator = SequentialNonceGenerator()
        assert [generator.next() for _ in range(3)] == [b"\x00", b"\x01", b"\x02"]
        assert generator.counter == 3

    def test_grows_past_one_byte(self):
        generator = SequentialNonceGenerator(start=255)
        assert generator.next() == b"\xff"
        assert generator.next() == b"\x01\x00"

    def test_negative_start(self):
        with pytest.raises(ValueError):
            SequentialNonceGenerator(start=-5)


class TestRandomNonceGenerator:

    def test_size(self):
        generator = RandomNonceGenerator(size=8)
        nonces = {generator.next() for _ in range(16)}
        assert all(len(n) == 8 for n in nonces)
        assert len(nonces) > 1

    def test_zero_size(self):
        with pytest.raises(ValueError):
            RandomNonceGenerator(size=0)


class TestAdapters:

    def test_callable(self):
        values = iter([bytearray(b"a"), b"b"])
        generator = CallableNonceGenerator(lambda: next(values))
        assert generator.next() == b"a"
        assert generator.next() == b"b"

    def test_iterable_exhaustion(self):
        generator = IterableNonceGenerator([b"x"])
        assert generator.next() == b"x"
        with pytest.raises(NonceSourceExhausted):
            generator.next()

    def test_protocol(self):
        assert isinstance(SequentialNonceGenerator(), NonceGenerator)
        assert isinstance(IterableNonceGenerator([]), NonceGenerator)
        assert not isinstance(object(), NonceGenerator)

    def test_strategies(self):
        for name, factory in NONCE_STRATEGIES.items():
            assert isinstance(factory(), NonceGenerator), name
