"""Outcome of one route provider lookup."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")

# Upstream trouble that may clear on a later request
TRANSIENT_CODES = frozenset(
    {"timeout", "transport_error", "rate_limited", "http_status", "empty_body", "invalid_json"}
)


class ProviderError(BaseModel):
    """Why a provider produced no route."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")

    @property
    def transient(self) -> bool:
        return self.code in TRANSIENT_CODES


class ProviderResult(BaseModel, Generic[T]):
    """What a single provider returned for one flight number.

    On success: ``data`` is populated.
    On failure: ``error`` says why, and the resolver moves on.
    """

    provider: str = Field(..., description="Name of the provider consulted")
    success: bool
    data: T | None = None
    error: ProviderError | None = None
    duration_ms: float | None = Field(default=None, ge=0)

    @classmethod
    def ok(cls, provider: str, data: T, duration_ms: float | None = None) -> "ProviderResult[T]":
        return cls(provider=provider, success=True, data=data, duration_ms=duration_ms)

    @classmethod
    def fail(
        cls, provider: str, code: str, message: str, duration_ms: float | None = None
    ) -> "ProviderResult[T]":
        return cls(
            provider=provider,
            success=False,
            error=ProviderError(code=code, message=message),
            duration_ms=duration_ms,
        )
