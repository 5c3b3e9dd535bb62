"""Prometheus instrumentation for signature verification.

Labels stay bounded: caller-supplied algorithm names outside the registry are
collapsed to "unknown".
"""
from __future__ import annotations

from typing import Iterable, Optional

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    CONTENT_TYPE_LATEST,
)

REGISTRY = CollectorRegistry()

VERIFY_COUNTER = Counter(
    "sigcheck_verifications_total",
    "Signature verifications by algorithm and outcome.",
    ["alg", "result", "reason"],
    registry=REGISTRY,
)
VERIFY_LATENCY = Histogram(
    "sigcheck_verify_seconds",
    "Wall time of one verification call.",
    ["alg"],
    registry=REGISTRY,
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)


def _alg_label(alg: Optional[str], known: Iterable[str]) -> str:
    if alg and alg in set(known):
        return alg
    return "unknown"


def observe_verification(alg: Optional[str], known: Iterable[str], verified: bool,
                         reason: Optional[str], latency_s: float) -> None:
    label = _alg_label(alg, known)
    VERIFY_COUNTER.labels(
        alg=label,
        result="verified" if verified else "failed",
        reason=reason or "none",
    ).inc()
    VERIFY_LATENCY.labels(alg=label).observe(latency_s)


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST


__all__ = ["REGISTRY", "VERIFY_COUNTER", "VERIFY_LATENCY", "observe_verification", "prometheus_latest"]
