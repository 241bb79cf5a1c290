from cryptography.hazmat.primitives import hashes

from hashcash_prover.errors import UnsupportedHashAlgorithm


# Keys are normalized identifiers: upper case with dashes removed.
ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "SHA1": hashes.SHA1,
    "SHA224": hashes.SHA224,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
    "SHA3256": hashes.SHA3_256,
    "SHA3512": hashes.SHA3_512,
}

# BLAKE2 constructors need an explicit digest size.
BLAKE2_SIZES: dict[str, tuple[type[hashes.HashAlgorithm], int]] = {
    "BLAKE2B": (hashes.BLAKE2b, 64),
    "BLAKE2S": (hashes.BLAKE2s, 32),
}

DISPLAY_NAMES = (
    "SHA-1",
    "SHA-224",
    "SHA-256",
    "SHA-384",
    "SHA-512",
    "SHA3-256",
    "SHA3-512",
    "BLAKE2b",
    "BLAKE2s",
)


def _normalize(algorithm_id: str) -> str:
    return algorithm_id.replace("-", "").replace("_", "").upper()


def get_algorithm(algorithm_id: str) -> hashes.HashAlgorithm:
    """Resolve a WebCrypto style identifier ("SHA-256", "sha256", ...) to a hash instance."""
    if not isinstance(algorithm_id, str):
        raise UnsupportedHashAlgorithm(repr(algorithm_id))

    key = _normalize(algorithm_id)
    if key in ALGORITHMS:
        return ALGORITHMS[key]()
    if key in BLAKE2_SIZES:
        algorithm_cls, size = BLAKE2_SIZES[key]
        return algorithm_cls(size)
    raise UnsupportedHashAlgorithm(algorithm_id)


def digest(algorithm_id: str, data: bytes) -> bytes:
    """Hash `data` with the named algorithm and return the raw digest bytes."""
    hasher = hashes.Hash(get_algorithm(algorithm_id))
    hasher.update(bytes(data))
    return hasher.finalize()


def digest_size(algorithm_id: str) -> int:
    return get_algorithm(algorithm_id).digest_size


def supported_algorithms() -> list[tuple[str, int]]:
    """Return (display name, digest size in bytes) for every supported identifier."""
    return [(name, digest_size(name)) for name in DISPLAY_NAMES]
