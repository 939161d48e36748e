"""Error taxonomy shared by the builder, executor, formatter, and transports.

Local errors (``InvalidArgument``) are deterministic and never retried.
Remote errors (``NotFound``, ``PermissionDenied``, ``Unavailable``) are raised
by transports and surfaced to the caller unmodified.
"""

from __future__ import annotations

from typing import Any, ClassVar


class SampleError(Exception):
    """Base class for every error raised by samplectl.

    Attributes:
        code: Stable machine-readable code (``"NOT_FOUND"``, ...).
        message: Human-readable description.
        detail: Structured context (field names, resource paths, ...).
    """

    code: ClassVar[str] = "UNKNOWN"

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail: dict[str, Any] = dict(detail or {})

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class InvalidArgument(SampleError):
    """Malformed or missing input, detected locally."""

    code = "INVALID_ARGUMENT"


class NotFound(SampleError):
    """The target resource path does not exist."""

    code = "NOT_FOUND"


class PermissionDenied(SampleError):
    """The caller is not authorized for the operation."""

    code = "PERMISSION_DENIED"


class Unavailable(SampleError):
    """Transient transport failure. The caller may retry."""

    code = "UNAVAILABLE"


class DeadlineExceeded(SampleError):
    """A caller-side wait ran past its deadline."""

    code = "DEADLINE_EXCEEDED"


ERROR_CLASSES: dict[str, type[SampleError]] = {
    cls.code: cls
    for cls in (InvalidArgument, NotFound, PermissionDenied, Unavailable, DeadlineExceeded)
}


def error_for_code(
    code: str,
    message: str,
    *,
    detail: dict[str, Any] | None = None,
) -> SampleError:
    """Build the exception matching a wire error *code*.

    Unknown codes map to the plain :class:`SampleError` with the code kept
    in ``detail`` so nothing is lost.
    """
    cls = ERROR_CLASSES.get(code.upper())
    if cls is None:
        merged = {"code": code, **(detail or {})}
        return SampleError(message, detail=merged)
    return cls(message, detail=detail)
