"""Public key parsing.

parse_public_key() turns normalized PEM text into a key handle usable by
verify_primitive(). It reports failure through KeyParseResult.error and never
hands back a partially usable key.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

SUPPORTED_CURVES = (ec.SECP256R1, ec.SECP384R1)


@dataclass(frozen=True)
class SharedSecret:
    """HMAC key. Kept out of repr so it never lands in logs."""

    secret: bytes = field(repr=False)


KeyHandle = Union[
    ec.EllipticCurvePublicKey,
    ed25519.Ed25519PublicKey,
    rsa.RSAPublicKey,
    SharedSecret,
]


@dataclass(frozen=True)
class KeyParseResult:
    handle: Optional[KeyHandle] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.handle is not None and self.error is None


def _fail(msg: str) -> KeyParseResult:
    return KeyParseResult(error=msg)


def parse_public_key(normalized_pem: str, max_bytes: Optional[int] = None) -> KeyParseResult:
    if not isinstance(normalized_pem, str):
        return _fail(f"expected PEM text, got {type(normalized_pem).__name__}")
    if "PRIVATE KEY-----" in normalized_pem:
        return _fail("private key material is not accepted")
    try:
        data = normalized_pem.encode("utf-8")
        if max_bytes is not None and len(data) > max_bytes:
            return _fail(f"key text exceeds {max_bytes} bytes")
        key = serialization.load_pem_public_key(data)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        return _fail(str(e) or e.__class__.__name__)
    if isinstance(key, ec.EllipticCurvePublicKey):
        if not isinstance(key.curve, SUPPORTED_CURVES):
            return _fail(f"unsupported curve: {key.curve.name}")
        return KeyParseResult(handle=key)
    if isinstance(key, (ed25519.Ed25519PublicKey, rsa.RSAPublicKey)):
        return KeyParseResult(handle=key)
    return _fail(f"unsupported key type: {type(key).__name__}")


def shared_secret(secret: bytes) -> KeyParseResult:
    if not isinstance(secret, (bytes, bytearray)):
        return _fail(f"expected secret bytes, got {type(secret).__name__}")
    if not secret:
        return _fail("empty shared secret")
    return KeyParseResult(handle=SharedSecret(bytes(secret)))


__all__ = ["KeyHandle", "KeyParseResult", "SharedSecret", "parse_public_key", "shared_secret"]
