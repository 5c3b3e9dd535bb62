import os

import pytest
from cryptography.hazmat.primitives import hashes, hmac, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from sigcheck.config import VerifierConfig
from sigcheck.verifier.orchestrator import SignatureVerifier

ALL_ALGS = [
    "ecdsa-p256-sha256",
    "ecdsa-p384-sha384",
    "ed25519",
    "rsa-pss-sha512",
    "rsa-v1_5-sha256",
    "hmac-sha256",
]
ASYMMETRIC_ALGS = [a for a in ALL_ALGS if a != "hmac-sha256"]


def public_pem(private_key) -> str:
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


def _generate(alg: str):
    if alg == "ecdsa-p256-sha256":
        return ec.generate_private_key(ec.SECP256R1())
    if alg == "ecdsa-p384-sha384":
        return ec.generate_private_key(ec.SECP384R1())
    if alg == "ed25519":
        return ed25519.Ed25519PrivateKey.generate()
    if alg in ("rsa-pss-sha512", "rsa-v1_5-sha256"):
        return rsa.generate_private_key(public_exponent=65537, key_size=2048)
    if alg == "hmac-sha256":
        return os.urandom(32)
    raise ValueError(alg)


def sign(alg: str, key, data: bytes) -> bytes:
    if alg == "ecdsa-p256-sha256":
        return key.sign(data, ec.ECDSA(hashes.SHA256()))
    if alg == "ecdsa-p384-sha384":
        return key.sign(data, ec.ECDSA(hashes.SHA384()))
    if alg == "ed25519":
        return key.sign(data)
    if alg == "rsa-pss-sha512":
        return key.sign(
            data,
            padding.PSS(mgf=padding.MGF1(hashes.SHA512()), salt_length=64),
            hashes.SHA512(),
        )
    if alg == "rsa-v1_5-sha256":
        return key.sign(data, padding.PKCS1v15(), hashes.SHA256())
    if alg == "hmac-sha256":
        mac = hmac.HMAC(key, hashes.SHA256())
        mac.update(data)
        return mac.finalize()
    raise ValueError(alg)


class KeySet:
    """One private key per algorithm plus a second, unrelated one."""

    def __init__(self):
        self._keys = {}
        self._others = {}
        rsa_key = _generate("rsa-pss-sha512")
        rsa_other = _generate("rsa-pss-sha512")
        for alg in ALL_ALGS:
            if alg.startswith("rsa-"):
                self._keys[alg], self._others[alg] = rsa_key, rsa_other
            else:
                self._keys[alg], self._others[alg] = _generate(alg), _generate(alg)

    def private(self, alg: str):
        return self._keys[alg]

    def public(self, alg: str, other: bool = False):
        key = (self._others if other else self._keys)[alg]
        if alg == "hmac-sha256":
            return key
        return public_pem(key)

    def sign(self, alg: str, data: bytes) -> bytes:
        return sign(alg, self._keys[alg], data)


@pytest.fixture(scope="session")
def keys() -> KeySet:
    return KeySet()


@pytest.fixture
def verifier() -> SignatureVerifier:
    return SignatureVerifier(config=VerifierConfig())
