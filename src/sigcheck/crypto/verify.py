"""Signature primitives behind the algorithm registry.

verify_primitive() runs exactly one cryptographic check and reports it as a
PrimitiveResult:

  VALID      the signature matches
  INVALID    well-formed signature that does not match
  MALFORMED  inputs cannot be checked with this primitive at all (key type
             does not fit the algorithm, wrong curve, wrong length, bad DER,
             hash selector that contradicts the algorithm)

Ed25519 is called without a hash argument. Every other family is called with
an instance of the descriptor's hash class.
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, List

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .alg_registry import (
    ECDSA,
    EDDSA,
    HMAC,
    INTRINSIC_HASH,
    RSA_PSS,
    RSA_V1_5,
    AlgorithmDescriptor,
    HashSelector,
)
from .keys import KeyHandle, SharedSecret

ED25519_SIGNATURE_LEN = 64
# RFC 9421 section 3.3.1
RSA_PSS_SALT_LEN = 64


class PrimitiveResult(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    MALFORMED = "malformed"


def _check(fn: Callable[[], None]) -> PrimitiveResult:
    try:
        fn()
    except InvalidSignature:
        return PrimitiveResult.INVALID
    except (ValueError, TypeError, UnsupportedAlgorithm):
        return PrimitiveResult.MALFORMED
    return PrimitiveResult.VALID


def _ecdsa_der_candidates(signature: bytes, key: ec.EllipticCurvePublicKey, sig_format: str) -> List[bytes]:
    size = (key.curve.key_size + 7) // 8
    out: List[bytes] = []
    if sig_format in ("auto", "raw") and len(signature) == 2 * size:
        r = int.from_bytes(signature[:size], "big")
        s = int.from_bytes(signature[size:], "big")
        out.append(encode_dss_signature(r, s))
    if sig_format in ("auto", "der"):
        try:
            decode_dss_signature(signature)
            out.append(signature)
        except ValueError:
            pass  # not DER; raw form (if any) already queued
    return out


def _verify_ecdsa(h: hashes.HashAlgorithm, message: bytes, key, signature: bytes,
                  descriptor: AlgorithmDescriptor, sig_format: str) -> PrimitiveResult:
    if not isinstance(key, ec.EllipticCurvePublicKey):
        return PrimitiveResult.MALFORMED
    if descriptor.curve is not None and not isinstance(key.curve, descriptor.curve):
        return PrimitiveResult.MALFORMED
    candidates = _ecdsa_der_candidates(signature, key, sig_format)
    if not candidates:
        return PrimitiveResult.MALFORMED
    result = PrimitiveResult.INVALID
    for der in candidates:
        result = _check(lambda: key.verify(der, message, ec.ECDSA(h)))
        if result is PrimitiveResult.VALID:
            break
    return result


def _verify_rsa(h: hashes.HashAlgorithm, message: bytes, key, signature: bytes, family: str) -> PrimitiveResult:
    if not isinstance(key, rsa.RSAPublicKey):
        return PrimitiveResult.MALFORMED
    if len(signature) != (key.key_size + 7) // 8:
        return PrimitiveResult.MALFORMED
    if family == RSA_PSS:
        pad = padding.PSS(mgf=padding.MGF1(h), salt_length=RSA_PSS_SALT_LEN)
    else:
        pad = padding.PKCS1v15()
    return _check(lambda: key.verify(signature, message, pad, h))


def _verify_hmac(h: hashes.HashAlgorithm, message: bytes, key, signature: bytes) -> PrimitiveResult:
    if not isinstance(key, SharedSecret):
        return PrimitiveResult.MALFORMED
    if len(signature) != h.digest_size:
        return PrimitiveResult.MALFORMED
    mac = hmac.HMAC(key.secret, h)
    mac.update(message)
    # HMAC.verify compares in constant time
    return _check(lambda: mac.verify(signature))


def verify_primitive(
    hash_alg: HashSelector,
    message: bytes,
    key: KeyHandle,
    signature: bytes,
    *,
    descriptor: AlgorithmDescriptor,
    ecdsa_format: str = "auto",
) -> PrimitiveResult:
    family = descriptor.family
    if family == EDDSA:
        if hash_alg is not INTRINSIC_HASH:
            return PrimitiveResult.MALFORMED
        if not isinstance(key, ed25519.Ed25519PublicKey):
            return PrimitiveResult.MALFORMED
        if len(signature) != ED25519_SIGNATURE_LEN:
            return PrimitiveResult.MALFORMED
        return _check(lambda: key.verify(signature, message))
    if hash_alg is INTRINSIC_HASH:
        return PrimitiveResult.MALFORMED
    h = hash_alg()
    if family == ECDSA:
        return _verify_ecdsa(h, message, key, signature, descriptor, ecdsa_format)
    if family in (RSA_PSS, RSA_V1_5):
        return _verify_rsa(h, message, key, signature, family)
    if family == HMAC:
        return _verify_hmac(h, message, key, signature)
    return PrimitiveResult.MALFORMED


__all__ = ["PrimitiveResult", "verify_primitive", "RSA_PSS_SALT_LEN"]
