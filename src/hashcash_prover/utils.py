import base64
import binascii
import importlib.util
import inspect
import types
from typing import Callable, Union, Literal, TypeAlias

from hashcash_prover.errors import PluginLoadError, PluginSignatureError
from hashcash_prover.nonces import NonceGenerator
from hashcash_prover.prover import check_nonce_generator

PLUGIN_FUNC_NAME = "make_nonce_generator"

PayloadFormat: TypeAlias = Union[Literal[
    "b64",
    "b64_urlsafe",
    "hex",
    "raw",
    "text",
], str]

OutputFormat: TypeAlias = Literal["hex", "b64"]


def load_module_from_file(module_file_path: str) -> types.ModuleType:
    """Load a Python module file."""
    spec = importlib.util.spec_from_file_location("nonce_plugin", module_file_path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Could not load spec for: {module_file_path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # executes user code
    return mod


def load_nonce_plugin(module_file_path: str) -> NonceGenerator:
    """Load a user defined nonce generator factory from a Python file and build a generator."""
    mod = load_module_from_file(module_file_path)
    factory: Callable[[], NonceGenerator] = getattr(mod, PLUGIN_FUNC_NAME, None)
    if factory is None:
        raise PluginLoadError(
            f"Plugin must define `{PLUGIN_FUNC_NAME}()` returning an object with a next() method"
        )

    sig = inspect.signature(factory)
    required = [
        p for p in sig.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if required:
        raise PluginSignatureError(f"{PLUGIN_FUNC_NAME} must be callable without arguments")

    generator = factory()
    check_nonce_generator(generator)
    return generator


def decode_payload(data: Union[str, bytes], format: PayloadFormat) -> bytes:
    """Turn user supplied payload text or file content into bytes."""
    if format in ("raw", "text"):
        return _as_bytes(data)
    text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
    text = text.strip()
    if format == "b64":
        return b64_decode(text)
    elif format == "b64_urlsafe":
        return b64_decode(text, urlsafe=True)
    elif format == "hex":
        try:
            return bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Invalid hex payload: {e}") from e
    else:
        raise ValueError(f"Invalid payload format: {format}")


def load_payload(file_path: str, format: PayloadFormat) -> bytes:
    """Load the payload from a file."""
    with open(file_path, "rb") as f:
        data = f.read()
    return decode_payload(data, format)


def encode_output(data: bytes, format: OutputFormat) -> str:
    if format == "hex":
        return data.hex()
    elif format == "b64":
        return b64_encode(data)
    raise ValueError(f"Invalid output format: {format}")


def _as_bytes(
    data: Union[str, bytes, bytearray, memoryview],
    *,
    encoding: str = "utf-8",
) -> bytes:
    """Normalize values to type bytes."""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode(encoding)
    raise TypeError(f"Expected str or bytes-like, got {type(data).__name__}")


def b64_encode(
    data: Union[str, bytes, bytearray, memoryview],
    *,
    urlsafe: bool = False,
    text_encoding: str = "utf-8",
) -> str:
    """Accepts str/bytes/etc and return a base64 string (standard or URL-safe)."""
    raw = _as_bytes(data, encoding=text_encoding)
    fn = base64.urlsafe_b64encode if urlsafe else base64.b64encode
    return fn(raw).decode("ascii")


def b64_decode(b64_text: str, *, urlsafe: bool = False) -> bytes:
    """Decodes standard or URL-safe b64. Tolerates missing '=' padding."""
    missing = len(b64_text) % 4
    if missing:
        b64_text += "=" * (4 - missing)

    try:
        if urlsafe:
            return base64.urlsafe_b64decode(b64_text)
        return base64.b64decode(b64_text, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
