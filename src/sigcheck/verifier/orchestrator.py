"""Signature verification pipeline.

SignatureVerifier.verify() takes the public key text, the signature base the
caller reconstructed, the raw signature bytes and the Signature-Input
parameters, and returns a VerificationOutcome. It does not raise.

Pipeline, stopping at the first failure:

  1. normalize the PEM layout           (crypto.pem)
  2. parse the key                      -> key_parse_error
  3. resolve params.alg in the registry -> missing_or_unsupported_algorithm
  4. run the primitive                  -> signature_mismatch unless VALID

A signature that does not match and one the primitive cannot even check
(wrong length, bad DER, key type that does not fit the algorithm) are both
reported as signature_mismatch.

created/expires/nonce are carried in VerificationParameters but not enforced
here; freshness is the caller's policy.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..config import VerifierConfig, load_config
from ..crypto.alg_registry import DEFAULT_REGISTRY, AlgorithmRegistry
from ..crypto.keys import KeyParseResult, parse_public_key, shared_secret
from ..crypto.pem import normalize_pem
from ..crypto.verify import PrimitiveResult, verify_primitive
from ..obs.prom import observe_verification
from ..utils.logging import get_logger
from .models import FailureReason, VerificationOutcome, VerificationParameters

log = get_logger(__name__)

PublicKeyInput = Union[str, bytes, bytearray]
ParamsInput = Union[VerificationParameters, Mapping[str, Any], None]

_PEM_PREFIX = b"-----BEGIN"


def _as_bytes(value: Any) -> Optional[bytes]:
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return None


def _coerce_params(params: ParamsInput) -> Tuple[Optional[VerificationParameters], Any]:
    """Returns (parameters or None if unusable, raw alg value for messages)."""
    if isinstance(params, VerificationParameters):
        return params, params.algorithm
    if params is None:
        return VerificationParameters(), None
    if not isinstance(params, Mapping):
        return None, None
    raw_alg = params.get("alg", params.get("algorithm"))
    try:
        return VerificationParameters.model_validate(dict(params)), raw_alg
    except ValidationError:
        return None, raw_alg


class SignatureVerifier:
    def __init__(
        self,
        registry: Optional[AlgorithmRegistry] = None,
        primitive: Callable[..., PrimitiveResult] = verify_primitive,
        config: Optional[VerifierConfig] = None,
    ):
        self.config = config or load_config()
        registry = registry if registry is not None else DEFAULT_REGISTRY
        if self.config.allowed_algs:
            unknown = [a for a in self.config.allowed_algs if a not in registry]
            if unknown:
                log.warning(f"allowed algorithm list names unregistered algorithm(s), dropping: {unknown}")
            registry = registry.restricted_to(a for a in self.config.allowed_algs if a in registry)
        self.registry = registry
        self.primitive = primitive

    def _load_key(self, public_key: Any) -> KeyParseResult:
        if isinstance(public_key, (bytes, bytearray)):
            if bytes(public_key).lstrip().startswith(_PEM_PREFIX):
                public_key = bytes(public_key).decode("utf-8", errors="replace")
            else:
                return shared_secret(bytes(public_key))
        if not isinstance(public_key, str):
            return KeyParseResult(error=f"unsupported key input type: {type(public_key).__name__}")
        normalized = normalize_pem(public_key)
        return parse_public_key(normalized, max_bytes=self.config.max_key_bytes)

    def _run(self, public_key: Any, data: Any, signature: Any,
             params: ParamsInput) -> Tuple[VerificationOutcome, Optional[str]]:
        key = self._load_key(public_key)
        if not key.ok:
            return VerificationOutcome.failed(
                FailureReason.KEY_PARSE_ERROR, f"Failed to parse public key: {key.error}"
            ), None

        parameters, raw_alg = _coerce_params(params)
        alg = parameters.algorithm if parameters is not None else None
        descriptor = self.registry.resolve(alg)
        if descriptor is None:
            return VerificationOutcome.failed(
                FailureReason.MISSING_OR_UNSUPPORTED_ALGORITHM, f"Unsupported or missing algorithm: {raw_alg}"
            ), None

        message = _as_bytes(data)
        sig = _as_bytes(signature) if not isinstance(signature, str) else None
        if message is None or sig is None:
            log.debug("signature base or signature has an unusable type")
            return VerificationOutcome.failed(FailureReason.SIGNATURE_MISMATCH, "Invalid signature"), descriptor.name

        result = self.primitive(
            descriptor.hash,
            message,
            key.handle,
            sig,
            descriptor=descriptor,
            ecdsa_format=self.config.ecdsa_signature_format,
        )
        if result == PrimitiveResult.VALID:
            return VerificationOutcome.ok(), descriptor.name
        if result == PrimitiveResult.MALFORMED:
            log.debug(f"signature not checkable with {descriptor.name}: malformed input")
        return VerificationOutcome.failed(FailureReason.SIGNATURE_MISMATCH, "Invalid signature"), descriptor.name

    def verify(self, public_key: PublicKeyInput, data: Union[str, bytes], signature: bytes,
               params: ParamsInput) -> VerificationOutcome:
        start = time.perf_counter()
        alg: Optional[str] = None
        try:
            outcome, alg = self._run(public_key, data, signature, params)
        except Exception:
            log.exception("unexpected error during signature verification")
            outcome = VerificationOutcome.failed(FailureReason.SIGNATURE_MISMATCH, "Invalid signature")
        if outcome.verified:
            log.debug(f"signature verified alg={alg}")
        else:
            log.info(f"signature verification failed reason={outcome.failure_reason.value} alg={alg}")
        if self.config.metrics_enabled:
            try:
                observe_verification(
                    alg,
                    self.registry.names(),
                    outcome.verified,
                    outcome.failure_reason.value if outcome.failure_reason else None,
                    time.perf_counter() - start,
                )
            except Exception as e:  # pragma: no cover
                log.debug(f"prometheus instrumentation failed: {e}")
        return outcome

    async def averify(self, public_key: PublicKeyInput, data: Union[str, bytes], signature: bytes,
                      params: ParamsInput) -> VerificationOutcome:
        return await asyncio.to_thread(self.verify, public_key, data, signature, params)


_default_verifier: Optional[SignatureVerifier] = None


def default_verifier() -> SignatureVerifier:
    global _default_verifier
    if _default_verifier is None:
        _default_verifier = SignatureVerifier()
    return _default_verifier


def verify_signature(public_key: PublicKeyInput, data: Union[str, bytes], signature: bytes,
                     params: ParamsInput) -> VerificationOutcome:
    return default_verifier().verify(public_key, data, signature, params)


async def averify_signature(public_key: PublicKeyInput, data: Union[str, bytes], signature: bytes,
                            params: ParamsInput) -> VerificationOutcome:
    return await default_verifier().averify(public_key, data, signature, params)


__all__ = ["SignatureVerifier", "default_verifier", "verify_signature", "averify_signature"]
