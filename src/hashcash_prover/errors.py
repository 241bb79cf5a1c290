class ProverError(Exception):
    """Base class for every error raised by hashcash_prover."""


class InvalidNonceGenerator(ProverError, TypeError):
    """The nonce generator does not expose a callable `next()`."""


class HashProviderError(ProverError):
    """The hash provider could not produce a digest."""


class UnsupportedHashAlgorithm(HashProviderError, ValueError):
    def __init__(self, algorithm_id: str) -> None:
        super().__init__(f"Unsupported hash algorithm: {algorithm_id!r}")
        self.algorithm_id = algorithm_id


class NonceSourceExhausted(ProverError):
    """An iterable-backed nonce generator ran out of candidates."""


class PluginLoadError(ProverError, RuntimeError):
    pass


class PluginSignatureError(ProverError, TypeError):
    pass
