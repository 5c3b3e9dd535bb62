from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class FailureReason(str, Enum):
    KEY_PARSE_ERROR = "key_parse_error"
    MISSING_OR_UNSUPPORTED_ALGORITHM = "missing_or_unsupported_algorithm"
    SIGNATURE_MISMATCH = "signature_mismatch"


class VerificationParameters(BaseModel):
    """Signature-Input parameters. Only `algorithm` is acted on."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    algorithm: Optional[str] = Field(default=None, validation_alias=AliasChoices("alg", "algorithm"))
    keyid: Optional[str] = Field(default=None, validation_alias=AliasChoices("keyid", "keyId", "key_id"))
    created: Optional[int] = None
    expires: Optional[int] = None
    nonce: Optional[str] = None
    tag: Optional[str] = None

    # Informational fields never fail validation; only `algorithm` is strict.
    @field_validator("created", "expires", mode="before")
    @classmethod
    def _lenient_int(cls, v: Any) -> Optional[int]:
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(v)
        except (TypeError, ValueError):
            return None

    @field_validator("keyid", "nonce", "tag", mode="before")
    @classmethod
    def _lenient_str(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)


class VerificationOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    verified: bool
    failure_reason: Optional[FailureReason] = None
    detail: Optional[str] = None

    @model_validator(mode="after")
    def _reason_iff_failed(self) -> "VerificationOutcome":
        if self.verified and self.failure_reason is not None:
            raise ValueError("verified outcome cannot carry a failure_reason")
        if not self.verified and self.failure_reason is None:
            raise ValueError("failed outcome requires a failure_reason")
        return self

    @classmethod
    def ok(cls) -> "VerificationOutcome":
        return cls(verified=True)

    @classmethod
    def failed(cls, reason: FailureReason, detail: Optional[str] = None) -> "VerificationOutcome":
        return cls(verified=False, failure_reason=reason, detail=detail)
