"""Algorithm registry for RFC 9421 HTTP message signatures.

Supported algorithms (RFC 9421 section 3.3):
  - ecdsa-p256-sha256   ECDSA, P-256 curve, SHA-256
  - ecdsa-p384-sha384   ECDSA, P-384 curve, SHA-384
  - ed25519             EdDSA over Curve25519 (SHA-512 is part of the algorithm)
  - rsa-pss-sha512      RSASSA-PSS, SHA-512, MGF1-SHA-512, 64 byte salt
  - rsa-v1_5-sha256     RSASSA-PKCS1-v1_5, SHA-256
  - hmac-sha256         HMAC over a shared secret, SHA-256

Each descriptor carries the hash class the primitive needs. Ed25519 gets the
INTRINSIC_HASH sentinel instead: its hash must never be passed to the
primitive separately.

Lookups are exact and case-sensitive. An unknown name resolves to None; there
is no fallback algorithm.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple, Type, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec


class _IntrinsicHash:
    """Marker for algorithms whose hash function is fixed by the scheme."""

    _instance: Optional["_IntrinsicHash"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INTRINSIC_HASH"


INTRINSIC_HASH = _IntrinsicHash()

HashSelector = Union[Type[hashes.HashAlgorithm], _IntrinsicHash]

# Primitive families
ECDSA = "ecdsa"
EDDSA = "eddsa"
RSA_PSS = "rsa-pss"
RSA_V1_5 = "rsa-v1_5"
HMAC = "hmac"


@dataclass(frozen=True)
class AlgorithmDescriptor:
    name: str
    hash: HashSelector
    family: str
    curve: Optional[Type[ec.EllipticCurve]] = None

    @property
    def hash_is_intrinsic(self) -> bool:
        return self.hash is INTRINSIC_HASH


_DEFAULT_DESCRIPTORS: Tuple[AlgorithmDescriptor, ...] = (
    AlgorithmDescriptor("ecdsa-p256-sha256", hashes.SHA256, ECDSA, ec.SECP256R1),
    AlgorithmDescriptor("ecdsa-p384-sha384", hashes.SHA384, ECDSA, ec.SECP384R1),
    AlgorithmDescriptor("ed25519", INTRINSIC_HASH, EDDSA),
    AlgorithmDescriptor("rsa-pss-sha512", hashes.SHA512, RSA_PSS),
    AlgorithmDescriptor("rsa-v1_5-sha256", hashes.SHA256, RSA_V1_5),
    AlgorithmDescriptor("hmac-sha256", hashes.SHA256, HMAC),
)


class AlgorithmRegistry:
    """Read-only name -> descriptor table."""

    __slots__ = ("_table",)

    def __init__(self, descriptors: Iterable[AlgorithmDescriptor]):
        table = {}
        for d in descriptors:
            if d.name in table:
                raise ValueError(f"duplicate algorithm name: {d.name}")
            table[d.name] = d
        self._table: Mapping[str, AlgorithmDescriptor] = MappingProxyType(table)

    def resolve(self, name: Optional[str]) -> Optional[AlgorithmDescriptor]:
        if not name or not isinstance(name, str):
            return None
        return self._table.get(name)

    def names(self) -> Tuple[str, ...]:
        return tuple(self._table)

    def restricted_to(self, names: Iterable[str]) -> "AlgorithmRegistry":
        wanted = set(names)
        unknown = wanted - set(self._table)
        if unknown:
            raise ValueError(f"unknown algorithm(s): {', '.join(sorted(unknown))}")
        return AlgorithmRegistry(d for d in self._table.values() if d.name in wanted)

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)


DEFAULT_REGISTRY = AlgorithmRegistry(_DEFAULT_DESCRIPTORS)


__all__ = [
    "AlgorithmDescriptor",
    "AlgorithmRegistry",
    "DEFAULT_REGISTRY",
    "INTRINSIC_HASH",
    "HashSelector",
    "ECDSA",
    "EDDSA",
    "RSA_PSS",
    "RSA_V1_5",
    "HMAC",
]
