import hashlib

import pytest

from hashcash_prover.errors import HashProviderError, UnsupportedHashAlgorithm
from hashcash_prover.hashing import digest, digest_size, get_algorithm, supported_algorithms


class TestDigest:
    """Hash provider"""

    @pytest.mark.parametrize("algorithm_id, reference", [
        ("SHA-1", hashlib.sha1),
        ("SHA-256", hashlib.sha256),
        ("SHA-384", hashlib.sha384),
        ("SHA-512", hashlib.sha512),
        ("SHA3-256", hashlib.sha3_256),
        ("BLAKE2b", hashlib.blake2b),
        ("BLAKE2s", hashlib.blake2s),
    ])
    def test_matches_hashlib(self, algorithm_id, reference):
        data = b"hashcash"
        assert digest(algorithm_id, data) == reference(data).digest()

    @pytest.mark.parametrize("algorithm_id", ["sha-256", "SHA256", "sha256", "Sha_256"])
    def test_identifier_spellings(self, algorithm_id):
        assert digest(algorithm_id, b"") == hashlib.sha256(b"").digest()

    def test_accepts_bytearray(self):
        assert digest("SHA-256", bytearray(b"abc")) == hashlib.sha256(b"abc").digest()

    def test_unsupported_algorithm(self):
        with pytest.raises(UnsupportedHashAlgorithm) as excinfo:
            digest("MD-NOPE", b"")
        assert excinfo.value.algorithm_id == "MD-NOPE"
        assert isinstance(excinfo.value, HashProviderError)
        assert isinstance(excinfo.value, ValueError)

    def test_non_string_identifier(self):
        with pytest.raises(UnsupportedHashAlgorithm):
            get_algorithm(256)


class TestDigestSize:

    @pytest.mark.parametrize("algorithm_id, size", [
        ("SHA-1", 20),
        ("SHA-224", 28),
        ("SHA-256", 32),
        ("SHA-512", 64),
        ("BLAKE2b", 64),
        ("BLAKE2s", 32),
    ])
    def test_sizes(self, algorithm_id, size):
        assert digest_size(algorithm_id) == size
        assert len(digest(algorithm_id, b"x")) == size

    def test_supported_algorithms_listing(self):
        listing = dict(supported_algorithms())
        assert listing["SHA-256"] == 32
        assert "SHA3-512" in listing
