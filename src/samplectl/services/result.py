"""ServiceResult and ServiceError — the contract between services and front ends.

INVARIANT: Every CallService method returns a ServiceResult; library errors
(:class:`~samplectl.domain.errors.SampleError`) are converted, never leaked.
The CLI and any other front end consume this type only.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from samplectl.domain.errors import SampleError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: SampleError) -> ServiceError:
        """Carry a library error's code, message, and detail over unchanged."""
        return cls(code=exc.code, message=exc.message, detail=exc.detail)


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the service operation (e.g. ``"call"``, ``"poll"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (truncated output, unknown plugins, ...).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans, counts).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, exc: SampleError) -> ServiceResult:
        """Failed result for *op* built from a library error."""
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc))
