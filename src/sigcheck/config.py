"""Verifier configuration loader.

Values come from the process environment (a local .env file is loaded first).
Invalid values fall back to defaults and log a warning.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

from .utils.logging import get_logger

load_dotenv()

log = get_logger(__name__)

ECDSA_SIG_FORMATS = ("auto", "der", "raw")

_DEFAULT_MAX_KEY_BYTES = 16384


@dataclass(frozen=True)
class VerifierConfig:
    # Empty tuple means every algorithm in the registry is allowed.
    allowed_algs: Tuple[str, ...] = ()
    max_key_bytes: int = _DEFAULT_MAX_KEY_BYTES
    ecdsa_signature_format: str = "auto"
    metrics_enabled: bool = True


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        log.warning(f"ignoring {name}={raw!r}: not an integer")
        return default
    if value <= 0:
        log.warning(f"ignoring {name}={raw!r}: must be positive")
        return default
    return value


def load_config() -> VerifierConfig:
    allowed = tuple(a.strip() for a in os.getenv("SIGCHECK_ALLOWED_ALGS", "").split(",") if a.strip())
    sig_format = os.getenv("SIGCHECK_ECDSA_SIG_FORMAT", "auto").strip().lower()
    if sig_format not in ECDSA_SIG_FORMATS:
        log.warning(f"ignoring SIGCHECK_ECDSA_SIG_FORMAT={sig_format!r}; expected one of {ECDSA_SIG_FORMATS}")
        sig_format = "auto"
    return VerifierConfig(
        allowed_algs=allowed,
        max_key_bytes=_env_int("SIGCHECK_MAX_KEY_BYTES", _DEFAULT_MAX_KEY_BYTES),
        ecdsa_signature_format=sig_format,
        metrics_enabled=os.getenv("SIGCHECK_METRICS", "true").lower() == "true",
    )
